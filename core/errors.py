"""Exception types for the Bravia favourites bridge."""


class BraviaError(Exception):
    """Base class for bridge errors."""


class TransportError(BraviaError):
    """The TV could not be reached (refused, reset, timed out)."""


class ProtocolError(BraviaError):
    """The TV answered with an HTTP error or a body that isn't a JSON-RPC result."""


class ConfigError(BraviaError):
    """Configuration is missing or invalid."""
