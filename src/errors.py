"""Fatal fault taxonomy for a validation run."""


class ValidationFailure(Exception):
    """Base for every fault that aborts the run with a non-zero exit."""


class ConfigError(ValidationFailure):
    """Raised when a required setting is missing or malformed."""


class DestinationError(ValidationFailure):
    """Raised when a destination call fails with a non-transient error."""


class RetryExhaustedError(DestinationError):
    """Raised when throttling outlasts the configured retry budget."""


class MalformedRecordError(ValidationFailure):
    """Raised when a delivered line does not match the producer's format."""
