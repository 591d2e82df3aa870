from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

ReleaseKind = Literal["patch", "minor", "major"]

_VERSION_RE = re.compile(r"^([0-9]+)\.([0-9]+)\.([0-9]+)$")


@dataclass(frozen=True, slots=True, order=True)
class SemVer:
    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def bump(self, kind: ReleaseKind) -> SemVer:
        match kind:
            case "major":
                return SemVer(self.major + 1, 0, 0)
            case "minor":
                return SemVer(self.major, self.minor + 1, 0)
            case "patch":
                return SemVer(self.major, self.minor, self.patch + 1)
            case _:
                raise AssertionError(f"unexpected release kind: {kind}")


def is_valid_version(version: str | None) -> bool:
    return version is not None and _VERSION_RE.fullmatch(version) is not None


def parse_version(version: str) -> SemVer | None:
    """Parse a plain `X.Y.Z` version; prereleases and `v` prefixes are rejected."""
    m = _VERSION_RE.fullmatch(version)
    if m is None:
        return None
    return SemVer(int(m.group(1)), int(m.group(2)), int(m.group(3)))


def tag_for(version: str) -> str:
    return f"v{version}"
