"""Error types raised by the even-number tool.

Nothing in the package handles these locally; they propagate to the CLI,
which prints them and exits with status 1.
"""


class EvenNumberError(Exception):
    pass


class AuthenticationError(EvenNumberError):
    """Wallet keyfile could not be unlocked with the given password."""


class NotFoundError(EvenNumberError):
    """A required file (keyfile, instance file, artifact) does not exist."""


class ParseError(EvenNumberError):
    """A file exists but its content is not what we expect."""


class ChainError(EvenNumberError):
    """Network failure, reverted transaction or receipt timeout."""
