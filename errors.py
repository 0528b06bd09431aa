"""Exception hierarchy shared by the generation, viewer and packaging layers."""


class SketchAssistError(Exception):
    """Base class for errors raised by this application."""


class ConfigError(SketchAssistError):
    """Required configuration is missing at startup."""


class GenerationError(SketchAssistError):
    """Generating a project from a prompt failed."""


class ValidationError(GenerationError):
    """The prompt or the model's answer does not have the expected shape."""


class ResponseParseError(ValidationError):
    """The model's answer could not be decoded as JSON."""


class ResponseValidationError(ValidationError):
    """The decoded answer is missing a project name or files."""


class TransportError(GenerationError):
    """The request to the model service failed."""


class PackagingError(SketchAssistError):
    """The project archive could not be built or saved."""


__all__ = [
    "SketchAssistError",
    "ConfigError",
    "GenerationError",
    "ValidationError",
    "ResponseParseError",
    "ResponseValidationError",
    "TransportError",
    "PackagingError",
]
