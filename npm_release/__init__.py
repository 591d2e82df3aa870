"""npm-release: release automation for npm packages."""

__version__ = "0.1.0"
