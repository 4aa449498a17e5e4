"""
Error taxonomy for the streak card app.
"""


class StreakCardError(Exception):
    """Base class for all streak card errors."""


class MissingParameter(StreakCardError):
    """A required query parameter was not supplied."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f'Missing "{name}" query parameter')


class UserNotFound(StreakCardError):
    """GitHub has no account with the requested login."""

    def __init__(self, username: str):
        self.username = username
        super().__init__(f"User '{username}' not found on GitHub")


class UpstreamFailure(StreakCardError):
    """The GitHub API failed, timed out or answered with garbage."""

    def __init__(self, message: str, status_code=None):
        self.status_code = status_code
        super().__init__(message)


class InvalidInput(StreakCardError, ValueError):
    """Calendar data is malformed and no statistics can be derived from it."""
