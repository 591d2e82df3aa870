"""Exit codes for the npm-release CLI.

The numeric values are the process exit status and should remain stable:
- 0: Success
- 1: User error (wrong branch, dirty tree, bad version, bad config)
- 2: Environment error (missing token, missing tool)
- 3: Build error (dependency install or build script failed)
- 4: Network error (push, publish or registry verification failed)
- 5: I/O error (manifest, changelog or report not readable/writable)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands."""

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    BUILD_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5
