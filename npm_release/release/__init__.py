"""Release pipeline: state, steps, changelog, report."""

from .errors import ReleaseError, release_error_code
from .pipeline import ReleasePipeline
from .semver import ReleaseKind, SemVer, parse_version
from .state import ReleaseOutcome, ReleaseState

__all__ = [
    "ReleaseError",
    "ReleaseKind",
    "ReleaseOutcome",
    "ReleasePipeline",
    "ReleaseState",
    "SemVer",
    "parse_version",
    "release_error_code",
]
