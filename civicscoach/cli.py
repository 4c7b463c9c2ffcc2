"""Click CLI: loads config, builds the pipeline, runs one query, a request inbox, or the API server."""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

import click
import uvicorn
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler

from civicscoach.inbox import archive_file, ensure_dirs, merge_request, parse_file, scan_inbox
from civicscoach.output import print_debate, print_failure, save_to_file
from civicscoach.pipeline import DebatePipeline, build_pipeline, handle_request
from civicscoach.server import create_app
from civicscoach.strategies.assembler import STRATEGIES as PROMPT_STRATEGIES
from config.config_loader import AppConfig, load_config

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)

CONTEXTS = ["constitutionalEducation", "academicResearch", "publicPolicy", "generalPublic", "creativeTasks"]
TASK_TYPES = ["debate", "analysis", "comparison", "explanation", "quiz"]
PROFICIENCIES = ["beginner", "intermediate", "advanced"]
STRATEGIES = list(PROMPT_STRATEGIES)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def _cli_request_options(
    context: str | None,
    task_type: str | None,
    proficiency: str | None,
    top_k: int | None,
    temperature: float | None,
    top_p: float | None,
    use_cot: bool | None,
    use_zero_shot: bool | None,
    use_dynamic: bool | None,
    additional_context: str | None,
) -> dict[str, Any]:
    """Map CLI flags to request-body keys. Unset flags stay None so they never override."""
    return {
        "context": context,
        "taskType": task_type,
        "proficiency": proficiency,
        "topK": top_k,
        "temperature": temperature,
        "top_p": top_p,
        "useCoT": use_cot,
        "useZeroShot": use_zero_shot,
        "useDynamicPrompting": use_dynamic,
        "additionalContext": additional_context,
    }


async def _run_single(
    pipeline: DebatePipeline,
    body: dict[str, Any],
    strategy: str | None,
    output_dir: Path | None,
    as_json: bool,
    slug_override: str | None = None,
) -> bool:
    """Run one request, print it, and save it. Returns True on success."""
    query = str(body.get("query", ""))

    if as_json:
        status, payload = await handle_request(pipeline, body, strategy)
    else:
        console.print(
            f"\n[bold cyan]CivicsCoach[/bold cyan] — "
            f"[italic]{query[:80]}{'...' if len(query) > 80 else ''}[/italic]\n"
        )
        with console.status("Generating debate..."):
            status, payload = await handle_request(pipeline, body, strategy)

    if as_json:
        click.echo(json.dumps(payload, indent=2, ensure_ascii=False))
    elif status == 200:
        print_debate(payload)
    else:
        print_failure(status, payload)

    if status != 200:
        return False

    if output_dir is not None:
        saved_path = save_to_file(payload, query, output_dir, slug_override=slug_override)
        console.print(f"\n[dim]Saved to: {saved_path}[/dim]")
    return True


async def _run_inbox(
    pipeline: DebatePipeline,
    inbox_dir: Path,
    archive_dir: Path,
    cli_options: dict[str, Any],
    strategy: str | None,
    output_dir: Path | None,
) -> None:
    """Process all .md request files in the inbox folder.

    Precedence for per-file settings: CLI flag > frontmatter > config default.
    """
    ensure_dirs(inbox_dir, archive_dir)
    files = scan_inbox(inbox_dir)

    if not files:
        click.echo("No files in inbox.")
        return

    for file_path in files:
        query, file_options = parse_file(file_path)
        body = merge_request(query, file_options, cli_options)
        ok = await _run_single(
            pipeline, body, strategy, output_dir, as_json=False, slug_override=file_path.stem
        )
        archived = archive_file(file_path, archive_dir, failed=not ok)
        if ok:
            click.echo(f"Processed: {file_path.name} (archived: {archived.name})")
        else:
            logger.error("Failed: %s (archived: %s)", file_path.name, archived.name)


def _serve(config: AppConfig, host: str, port: int) -> None:
    app = create_app(build_pipeline(config))
    uvicorn.run(app, host=host, port=port)


@click.command()
@click.argument("query", required=False)
@click.option("--file", "request_file", type=click.Path(exists=True), help="Read query and options from .md file")
@click.option("--context", type=click.Choice(CONTEXTS), default=None, help="Audience context")
@click.option("--task-type", type=click.Choice(TASK_TYPES), default=None, help="Kind of output to generate")
@click.option("--proficiency", type=click.Choice(PROFICIENCIES), default=None, help="Audience skill level")
@click.option("--top-k", type=int, default=None, help="Override the number of retrieved chunks (1-20)")
@click.option("--temperature", type=float, default=None, help="Override sampling temperature (0-2)")
@click.option("--top-p", type=float, default=None, help="Override nucleus sampling probability (0-1)")
@click.option("--cot/--no-cot", "use_cot", default=None, help="Allow hidden step-by-step reasoning")
@click.option("--zero-shot/--no-zero-shot", "use_zero_shot", default=None, help="Use zero-shot prompting")
@click.option("--dynamic/--no-dynamic", "use_dynamic", default=None, help="Use dynamic prompting")
@click.option("--strategy", type=click.Choice(STRATEGIES), default=None,
              help="Force a prompting strategy, ignoring the strategy flags")
@click.option("--additional-context", default=None, help="Extra context appended to the prompt")
@click.option("--json", "as_json", is_flag=True, help="Print the raw response payload as JSON")
@click.option("--output", "output_path", default=None, help="Output directory (default: from config)")
@click.option("--no-save", is_flag=True, help="Do not write a markdown file")
@click.option("--inbox", "use_inbox", is_flag=True, default=False, help="Process all .md files in inbox folder")
@click.option("--inbox-dir", "inbox_dir_override", default=None,
              help="Override inbox folder path (default: from config)")
@click.option("--serve", is_flag=True, help="Start the HTTP API instead of running a query")
@click.option("--host", default="127.0.0.1", help="API host for --serve")
@click.option("--port", default=8000, type=int, help="API port for --serve")
@click.option("--verbose", is_flag=True, help="Enable DEBUG-level logging")
def main(
    query: str | None,
    request_file: str | None,
    context: str | None,
    task_type: str | None,
    proficiency: str | None,
    top_k: int | None,
    temperature: float | None,
    top_p: float | None,
    use_cot: bool | None,
    use_zero_shot: bool | None,
    use_dynamic: bool | None,
    strategy: str | None,
    additional_context: str | None,
    as_json: bool,
    output_path: str | None,
    no_save: bool,
    use_inbox: bool,
    inbox_dir_override: str | None,
    serve: bool,
    host: str,
    port: int,
    verbose: bool,
) -> None:
    """CivicsCoach -- evidence-first debate generator for Indian Polity.

    \b
    Examples:
      civicscoach "What is the Basic Structure Doctrine?"
      civicscoach "Explain Article 370" --context generalPublic --task-type explanation --proficiency beginner
      civicscoach "Money Bills vs ordinary bills" --zero-shot --no-cot
      civicscoach --file question.md
      civicscoach --inbox
      civicscoach --serve --port 8000
    """
    load_dotenv()
    _setup_logging(verbose)

    try:
        config = load_config()
    except (FileNotFoundError, KeyError, ValueError) as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        sys.exit(1)

    if serve:
        _serve(config, host, port)
        return

    try:
        pipeline = build_pipeline(config)
    except (FileNotFoundError, ValueError) as exc:
        console.print(f"[bold red]Corpus error:[/bold red] {exc}")
        sys.exit(1)

    cli_options = _cli_request_options(
        context, task_type, proficiency, top_k, temperature, top_p,
        use_cot, use_zero_shot, use_dynamic, additional_context,
    )
    output_dir = None if no_save else (Path(output_path) if output_path else config.defaults.output_dir)

    if use_inbox:
        inbox_dir = Path(inbox_dir_override) if inbox_dir_override else config.inbox.dir
        asyncio.run(
            _run_inbox(
                pipeline=pipeline,
                inbox_dir=inbox_dir,
                archive_dir=config.inbox.archive_dir,
                cli_options=cli_options,
                strategy=strategy,
                output_dir=output_dir,
            )
        )
        return

    if request_file:
        file_query, file_options = parse_file(Path(request_file))
        body = merge_request(file_query, file_options, cli_options)
    elif query:
        body = merge_request(query, {}, cli_options)
    else:
        console.print("[bold red]Error:[/bold red] Provide a QUERY argument, --file, --inbox, or --serve.")
        sys.exit(1)

    ok = asyncio.run(_run_single(pipeline, body, strategy, output_dir, as_json))
    if not ok:
        sys.exit(1)


if __name__ == "__main__":
    main()
