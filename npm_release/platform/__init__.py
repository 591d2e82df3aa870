"""Platform abstraction layer."""

from .files import atomic_write_text, read_text_if_exists
from .process import ProcessError, run, run_live

__all__ = [
    "ProcessError",
    "atomic_write_text",
    "read_text_if_exists",
    "run",
    "run_live",
]
