class ThreadError(Exception):
    """Base class for errors raised around changelog discussion threads."""


class FetchError(ThreadError):
    """Retrieving or storing changelog entries or comments failed (network or server)."""


class ValidationError(ThreadError):
    """A comment was submitted with empty content."""
