"""npm package manager and package.json access."""

from .client import NpmClient, NpmError
from .manifest import Manifest, ManifestError, read_manifest

__all__ = [
    "Manifest",
    "ManifestError",
    "NpmClient",
    "NpmError",
    "read_manifest",
]
