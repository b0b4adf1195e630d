from typing import Optional


class MailuBuilderError(Exception):
    """Base exception for all application-specific errors."""

    pass


# --- 1. Errors related to loading, parsing and validating the configuration ---
class ConfigurationError(MailuBuilderError):
    """
    Raised when the deployment configuration is malformed.

    `field` carries the dotted path of the offending value (e.g. ``hostnames[1]``)
    when it is known.
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class ConfigFileMissingError(ConfigurationError):
    """Raised when the main configuration file cannot be found."""

    pass


class ConfigParsingError(ConfigurationError):
    """Raised when a YAML configuration file is syntactically incorrect."""

    pass


class ConfigValidationError(ConfigurationError):
    """Raised when the configuration fails structural validation (e.g., Pydantic)."""

    pass


# --- 2. Errors related to the composition of components ---
class DefinitionError(MailuBuilderError):
    """Base class for errors in the logical composition of the deployment."""

    pass


class DependencyError(DefinitionError):
    """Raised when a builder requires a peer handle that was never built."""

    def __init__(self, requester: str, missing: str, message: Optional[str] = None):
        super().__init__(
            message
            or f"Component '{requester}' requires '{missing}', which was not built (is it disabled?)."
        )
        self.requester = requester
        self.missing = missing


class CompositionPreconditionError(DefinitionError):
    """Raised when an optional subsystem is composed without its required inputs."""

    def __init__(self, composer: str, missing: str, message: Optional[str] = None):
        super().__init__(
            message or f"Cannot compose '{composer}': missing prerequisite '{missing}'."
        )
        self.composer = composer
        self.missing = missing


# --- 3. Errors that occur while assembling the resource graph ---
class BuildError(MailuBuilderError):
    """Base class for errors that occur during the generation of output resources."""

    pass


class UnsupportedFeatureError(BuildError):
    """Raised when a requested feature is not implemented."""

    pass
