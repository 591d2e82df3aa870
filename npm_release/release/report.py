"""Release report rendering.

The report is a fixed-section markdown document, rewritten on every run.
"""

from __future__ import annotations

from pathlib import Path

from npm_release.platform.files import atomic_write_text
from npm_release.release.state import ReleaseState


def _bullets(items: list[str], empty: str) -> list[str]:
    if not items:
        return [empty]
    return [f"- {item}" for item in items]


def render_report(state: ReleaseState) -> str:
    lines: list[str] = []
    lines.append("# Release Report")
    lines.append(f"**Date:** {state.timestamp.isoformat()}")
    lines.append(f"**Status:** {state.outcome}")
    lines.append(f"**Version:** {state.version or 'unknown'}")
    lines.append(f"**Commit SHA:** {state.commit_sha or 'unknown'}")
    lines.append("")

    lines.append("## Registry URLs")
    lines.extend(_bullets(state.registry_urls, "None"))
    lines.append("")

    lines.append("## Issues Found")
    lines.extend(_bullets(state.all_issues, "None"))
    lines.append("")

    lines.append("## Applied Solutions")
    lines.extend(_bullets(state.solutions, "None"))
    lines.append("")

    lines.append("## Package Information")
    lines.append("```")
    lines.append(state.package_info or "Not available")
    lines.append("```")

    return "\n".join(lines) + "\n"


def write_report(path: Path, state: ReleaseState) -> None:
    """Overwrite the report file. OSError propagates."""
    atomic_write_text(path, render_report(state))
