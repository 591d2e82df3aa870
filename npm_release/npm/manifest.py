"""package.json access."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

from npm_release.core.result import Err, Ok, Result
from npm_release.core.structured import as_str_dict, get_str, get_table

__all__ = ["Manifest", "ManifestError", "read_manifest"]


@dataclass(frozen=True, slots=True)
class ManifestError:
    message: str
    path: Path


@dataclass(frozen=True, slots=True)
class Manifest:
    """The fields of package.json the release needs."""

    name: str
    version: str | None
    scripts: dict[str, str] = field(default_factory=dict)

    @property
    def is_scoped(self) -> bool:
        """True for `@scope/name` packages."""
        return self.name.startswith("@") and "/" in self.name

    def has_script(self, name: str) -> bool:
        return bool(self.scripts.get(name, "").strip())


def read_manifest(path: Path) -> Result[Manifest, ManifestError]:
    """Read and validate package.json.

    A missing `version` is not an error here; callers validate its format.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        return Err(ManifestError(f"failed to read {path.name}: {e}", path=path))

    try:
        obj: object = json.loads(text)
    except json.JSONDecodeError as e:
        return Err(ManifestError(f"invalid JSON in {path.name}: {e}", path=path))

    data = as_str_dict(obj)
    if data is None:
        return Err(ManifestError(f"invalid JSON root in {path.name}", path=path))

    name = get_str(data, "name")
    if name is None:
        return Err(ManifestError(f"missing name in {path.name}", path=path))

    scripts_table = get_table(data, "scripts") or {}
    scripts = {k: v for k, v in scripts_table.items() if isinstance(v, str)}

    return Ok(Manifest(name=name, version=get_str(data, "version"), scripts=scripts))
