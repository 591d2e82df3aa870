"""CHANGELOG.md section rendering and insertion.

The changelog is reverse-chronological: a free-form title block, then one
`## [<version>] - <date>` section per release. New sections go between the
title block and the newest existing section; nothing below is touched.
"""

from __future__ import annotations

from datetime import date

DEFAULT_TITLE = (
    "# Changelog\n\nAll notable changes to this project are documented in this file.\n\n"
)
PLACEHOLDER_ENTRY = "- Automatic release"

_SECTION_PREFIX = "## ["


def commit_entries(commits: list[str]) -> list[str]:
    return [f"- {c}" for c in commits]


def staged_entry(paths: list[str]) -> list[str]:
    if not paths:
        return []
    return [f"- Changed files: {', '.join(paths)}"]


def build_entry(version: str, day: date, changes: list[str]) -> str:
    lines: list[str] = []
    lines.append(f"{_SECTION_PREFIX}{version}] - {day.isoformat()}")
    lines.append("")
    lines.append("### Changed")
    lines.extend(changes or [PLACEHOLDER_ENTRY])
    lines.append("")
    return "\n".join(lines) + "\n"


def split_header(text: str) -> tuple[str, str]:
    """Split at the first version heading: (title block, existing sections).

    Without any version heading the whole text is the title block.
    """
    offset = 0
    for line in text.splitlines(keepends=True):
        if line.startswith(_SECTION_PREFIX):
            return text[:offset], text[offset:]
        offset += len(line)
    return text, ""


def insert_entry(text: str, entry: str) -> str:
    header, rest = split_header(text)
    if header and not header.endswith("\n"):
        header += "\n"
    return header + entry + rest


def has_entry(text: str, version: str) -> bool:
    """True if a section for this version is already present."""
    prefix = f"{_SECTION_PREFIX}{version}]"
    return any(line.startswith(prefix) for line in text.splitlines())
