"""Rich console output and markdown file save for debate results."""

import json
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)


def _slug(text: str, max_len: int = 40) -> str:
    """Convert text to a filename-safe slug."""
    slug = re.sub(r"[^\w\s-]", "", text.lower())
    slug = re.sub(r"[\s_-]+", "-", slug).strip("-")
    return slug[:max_len]


def _citation_line(citation: Any) -> str:
    if not isinstance(citation, dict):
        return str(citation)
    label = citation.get("source") or citation.get("id") or "source"
    snippet = citation.get("snippet", "")
    return f"[{label}] {snippet}".strip()


def _quiz_question(item: Any) -> str:
    if not isinstance(item, dict):
        return str(item)
    return str(item.get("q") or item.get("question") or "")


def _parameter_summary(metadata: dict[str, Any]) -> str:
    return (
        f"Strategy: {metadata.get('promptingStrategy')} | "
        f"Complexity: {metadata.get('queryComplexity')} | "
        f"temperature={metadata.get('temperature')} top_p={metadata.get('topP')} "
        f"top_k={metadata.get('topK')}"
    )


def print_debate(payload: dict[str, Any]) -> None:
    """Print a successful debate response to the console."""
    data = payload["data"]
    metadata = payload.get("metadata", {})

    title = "[bold green]CivicsCoach Debate[/bold green]"
    if metadata.get("demo"):
        title += " [yellow](demo: rate limited)[/yellow]"
    console.print(Rule(title))
    console.print(Text(_parameter_summary(metadata), style="dim"))

    console.print(Panel(str(data.get("stance", "")), title="[bold]Stance[/bold]", border_style="green"))
    console.print(
        Panel(str(data.get("counterStance", "")), title="[bold]Counter-stance[/bold]", border_style="red")
    )

    citations = data.get("citations") or []
    if citations:
        console.print(Rule("[bold cyan]Citations[/bold cyan]"))
        for i, citation in enumerate(citations, start=1):
            console.print(f"{i}. {_citation_line(citation)}")

    quiz = data.get("quiz") or []
    if quiz:
        table = Table(title="Quiz", show_lines=True)
        table.add_column("#", style="dim", width=3)
        table.add_column("Question")
        table.add_column("Options")
        for i, item in enumerate(quiz, start=1):
            options = item.get("options", []) if isinstance(item, dict) else []
            table.add_row(str(i), _quiz_question(item), "\n".join(str(o) for o in options))
        console.print(table)


def print_failure(status: int, payload: dict[str, Any]) -> None:
    console.print(f"[bold red]Error ({status}):[/bold red] {payload.get('error')}")
    if payload.get("details"):
        console.print(f"[dim]{payload['details']}[/dim]")


def save_to_file(
    payload: dict[str, Any],
    query: str,
    output_dir: Path,
    slug_override: str | None = None,
) -> Path:
    """Save a successful debate response as a markdown file.

    Args:
        payload: Success payload from the pipeline.
        query: The query text the debate answers.
        output_dir: Directory to save the file in.
        slug_override: If provided, use this as the filename stem instead of
            deriving one from the query. Useful for inbox mode.

    Returns:
        Path to the saved file.
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    slug = slug_override if slug_override is not None else _slug(query)
    filepath = output_dir / f"{timestamp}_{slug}.md"

    data = payload["data"]
    metadata = payload.get("metadata", {})

    lines: list[str] = [
        f"# CivicsCoach Debate: {query[:80]}",
        "",
        f"**Date:** {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
        f"**Context:** {metadata.get('context')} / {metadata.get('taskType')} / {metadata.get('proficiency')}",
        f"**Parameters:** {_parameter_summary(metadata)}",
    ]
    if metadata.get("demo"):
        lines.append("**Mode:** demo (rate limited)")
    lines += ["", "---", "", "## Stance", "", str(data.get("stance", "")), ""]
    lines += ["## Counter-stance", "", str(data.get("counterStance", "")), ""]

    lines += ["## Citations", ""]
    for i, citation in enumerate(data.get("citations") or [], start=1):
        lines.append(f"{i}. {_citation_line(citation)}")
    lines.append("")

    quiz = data.get("quiz") or []
    if quiz:
        lines += ["## Quiz", ""]
        for i, item in enumerate(quiz, start=1):
            lines.append(f"{i}. {_quiz_question(item)}")
            options = item.get("options", []) if isinstance(item, dict) else []
            lines.extend(f"   - {o}" for o in options)
        lines.append("")

    lines += ["## Retrieval", "", "```json", json.dumps(metadata.get("retrievalScores", []), indent=2), "```", ""]

    filepath.write_text("\n".join(lines), encoding="utf-8")
    logger.info("Debate saved to: %s", filepath)
    return filepath
