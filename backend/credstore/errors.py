"""Exception hierarchy for the credential store."""


class CredentialStoreError(Exception):
    """Base class for credential store failures."""


class SerializationError(CredentialStoreError):
    """A credential could not be converted to or from its stored form."""


class UnderlyingStoreError(CredentialStoreError):
    """The key-value backend rejected a get, set or remove call."""


class ConfigError(ValueError):
    """Invalid credential store settings."""
