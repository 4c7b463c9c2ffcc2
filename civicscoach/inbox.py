"""Inbox folder scanning, request-file parsing, and archive logic.

A request file is markdown: the body is the query, and optional YAML
frontmatter carries request options using the HTTP body keys (context,
taskType, proficiency, topK, temperature, top_p, useCoT, useZeroShot,
useDynamicPrompting, additionalContext).
"""

import shutil
from datetime import datetime
from pathlib import Path
from typing import Any

import frontmatter


def ensure_dirs(inbox_dir: Path, archive_dir: Path) -> None:
    """Create inbox and archive directories if they don't exist."""
    inbox_dir.mkdir(parents=True, exist_ok=True)
    archive_dir.mkdir(parents=True, exist_ok=True)


def scan_inbox(inbox_dir: Path) -> list[Path]:
    """Return all .md files in inbox_dir, sorted by mtime ascending (oldest first)."""
    files = list(inbox_dir.glob("*.md"))
    return sorted(files, key=lambda p: p.stat().st_mtime)


def parse_file(file_path: Path) -> tuple[str, dict[str, Any]]:
    """Parse a markdown request file with optional YAML frontmatter.

    Returns:
        (query, options). options is {} when there is no frontmatter.
    """
    post = frontmatter.load(str(file_path))
    return post.content.strip(), dict(post.metadata)


def merge_request(query: str, file_options: dict[str, Any], cli_options: dict[str, Any]) -> dict[str, Any]:
    """Build a request body. CLI options win over frontmatter; unset (None) CLI options are ignored."""
    body = dict(file_options)
    body.update({k: v for k, v in cli_options.items() if v is not None})
    body["query"] = query
    return body


def archive_file(file_path: Path, archive_dir: Path, *, failed: bool = False) -> Path:
    """Move file to archive_dir with a timestamp prefix.

    Args:
        file_path: Source file to archive.
        archive_dir: Destination directory.
        failed: If True, prefix filename with "FAILED_".

    Returns:
        Path to the archived file.
    """
    timestamp = datetime.now().strftime("%Y-%m-%dT%H%M")
    prefix = "FAILED_" if failed else ""
    dest = archive_dir / f"{prefix}{timestamp}_{file_path.name}"
    shutil.move(str(file_path), str(dest))
    return dest
