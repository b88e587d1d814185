"""
Error taxonomy. Everything the core raises derives from EnforcerError.
"""


class EnforcerError(Exception):
    """Base class for all enforcer errors."""


class CredentialError(EnforcerError):
    """JWT is malformed, empty, or rejected by the remote service."""


class NetworkError(EnforcerError):
    """Transport failure or timeout talking to the remote service."""


class RemoteProtocolError(EnforcerError):
    """Unexpected status code or response schema."""


class PersistenceError(EnforcerError):
    """Token or done-marker file could not be written/removed."""


class ChannelError(EnforcerError):
    """A command could not be delivered to the polling actor."""


class ConfigError(EnforcerError):
    """A configuration value is invalid."""
