# springlink/errors.py
"""Error and warning types raised by the spring element kernel."""


class SpringError(RuntimeError):
    """Base class for all spring element failures."""
    pass


class ConfigurationError(SpringError, ValueError):
    """Raised when the defining parameters of an element are invalid."""
    pass


class GeometryError(SpringError, ValueError):
    """Raised when node geometry or orientation vectors give no valid triad."""
    pass


class DecodeError(SpringError, ValueError):
    """Raised when a serialized element cannot be reconstructed."""
    pass


class UnknownResponseError(SpringError, KeyError):
    """Raised when a response name is not recognized by the element."""
    pass


class ConfigurationWarning(UserWarning):
    """Issued for accepted but suspicious configurations."""
    pass
