# src/ddply/exceptions.py

class DeployError(Exception):
    """Base class for failures reported by ddply."""


class InvalidSourceError(DeployError):
    pass


class ConfigNotFoundError(DeployError):
    pass


class ConfigParseError(DeployError):
    pass


class ResolutionError(DeployError):
    """A shared source path could not be made absolute."""


class RemovalError(DeployError):
    """An existing destination entry could not be removed before linking."""
