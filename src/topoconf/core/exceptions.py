class TopoConfError(Exception):
    """Base exception for topoconf."""

    pass


class ConfigurationError(TopoConfError, ValueError):
    """Raised when the controller settings are invalid."""

    pass


class CodecError(TopoConfError):
    """Base exception for configuration encoding and decoding errors."""

    pass


class SerializationError(CodecError):
    """Raised when a DerivedConfig cannot be serialized."""

    pass


class ParseError(CodecError):
    """Raised when serialized configuration text is malformed."""

    pass


class KubeletConfigDecodeError(CodecError):
    """Raised when a KubeletConfig payload cannot be decoded."""

    pass


class ArtifactError(TopoConfError):
    """Base exception for malformed or missing published artifacts."""

    pass


class MissingArtifactError(ArtifactError):
    """Raised when the config map reference is absent."""

    pass


class MissingDataError(ArtifactError):
    """Raised when the config map carries no data."""

    pass


class MissingKeyError(ArtifactError):
    """Raised when the config map data lacks the expected key."""

    pass


class StorageError(TopoConfError):
    """Raised when the cluster storage layer fails."""

    pass


class InvalidKubeletConfigError(TopoConfError):
    """Raised when a KubeletConfig targets no pool managed by the declaration."""

    def __init__(self, object_name: str, reason: str):
        self.object_name = object_name
        self.reason = reason
        super().__init__(f"invalid KubeletConfig {object_name!r}: {reason}")
