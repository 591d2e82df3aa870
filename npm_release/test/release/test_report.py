from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from npm_release.release.report import render_report, write_report
from npm_release.release.state import ReleaseState

STAMP = datetime(2026, 10, 19, 12, 30, tzinfo=timezone.utc)


def test_empty_state_uses_placeholders() -> None:
    state = ReleaseState(timestamp=STAMP)
    state.finalize(failed=True)

    assert render_report(state) == (
        "# Release Report\n"
        "**Date:** 2026-10-19T12:30:00+00:00\n"
        "**Status:** failed\n"
        "**Version:** unknown\n"
        "**Commit SHA:** unknown\n"
        "\n"
        "## Registry URLs\n"
        "None\n"
        "\n"
        "## Issues Found\n"
        "None\n"
        "\n"
        "## Applied Solutions\n"
        "None\n"
        "\n"
        "## Package Information\n"
        "```\n"
        "Not available\n"
        "```\n"
    )


def test_full_state() -> None:
    state = ReleaseState(timestamp=STAMP, version="1.0.1", commit_sha="abc123")
    state.registry_urls.append("https://www.npmjs.com/package/tool")
    state.record_issue("Tests not configured or failing", "Add or fix tests")
    state.warnings.append("no changes found since v1.0.0")
    state.package_info = "tool@1.0.1 | MIT"
    state.finalize(failed=False)

    report = render_report(state)

    assert "**Status:** completed" in report
    assert "**Version:** 1.0.1" in report
    assert "**Commit SHA:** abc123" in report
    assert "## Registry URLs\n- https://www.npmjs.com/package/tool\n" in report
    assert (
        "## Issues Found\n- Tests not configured or failing\n- no changes found since v1.0.0\n"
        in report
    )
    assert "## Applied Solutions\n- Add or fix tests\n" in report
    assert "```\ntool@1.0.1 | MIT\n```" in report


def test_write_report_overwrites(tmp_path: Path) -> None:
    path = tmp_path / "report.md"
    path.write_text("old", encoding="utf-8")
    state = ReleaseState(timestamp=STAMP)

    write_report(path, state)

    assert path.read_text(encoding="utf-8").startswith("# Release Report\n")
