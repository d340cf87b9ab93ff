"""outdated-why - Know which dependency updates actually matter."""

__version__ = "0.1.0"
