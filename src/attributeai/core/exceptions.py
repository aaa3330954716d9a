"""Custom exceptions for AttributeAI."""

from enum import Enum


class ErrorKind(str, Enum):
    """Kinds of per-journey failures reported alongside batch results."""

    EMPTY_JOURNEY = "EmptyJourney"
    INVALID_CONVERSION = "InvalidConversion"
    INVALID_TIMESTAMP = "InvalidTimestamp"
    MALFORMED_JOURNEY = "MalformedJourney"


class AttributeAIError(Exception):
    """Base exception for all AttributeAI errors."""

    pass


class ConfigurationError(AttributeAIError):
    """Raised when configuration is invalid."""

    pass


class AttributionError(AttributeAIError):
    """Raised when attribution fails."""

    pass


class JourneyValidationError(AttributionError):
    """Raised when a single journey cannot be attributed.

    These errors are recovered per journey: the engine records them and
    keeps processing the rest of the batch.
    """

    kind: ErrorKind = ErrorKind.MALFORMED_JOURNEY

    def __init__(self, message: str, customer_id: str | None = None):
        """Initialize journey validation error.

        Args:
            message: Human-readable description of the problem
            customer_id: Customer whose journey failed (if known)
        """
        super().__init__(message)
        self.customer_id = customer_id
        self.detail = message


class EmptyJourneyError(JourneyValidationError):
    """Raised when a journey has no touchpoints."""

    kind = ErrorKind.EMPTY_JOURNEY


class InvalidConversionError(JourneyValidationError):
    """Raised when the conversion value is not positive or its timestamp is missing."""

    kind = ErrorKind.INVALID_CONVERSION


class InvalidTimestampError(JourneyValidationError):
    """Raised when a touchpoint happens after the conversion or is unparsable."""

    kind = ErrorKind.INVALID_TIMESTAMP


class MalformedJourneyError(JourneyValidationError):
    """Raised when a raw journey record fails schema validation."""

    kind = ErrorKind.MALFORMED_JOURNEY


class UnknownModelError(AttributionError):
    """Raised when an attribution model key is not supported."""

    def __init__(self, model: object):
        """Initialize unknown model error.

        Args:
            model: The model key that was requested
        """
        self.model = model
        super().__init__(f"Unsupported attribution model: {model!r}")


class InvalidParameterError(AttributionError):
    """Raised when an attribution parameter is structurally invalid."""

    def __init__(self, parameter: str, value: object, reason: str):
        """Initialize invalid parameter error.

        Args:
            parameter: Name of the offending parameter
            value: Value that was supplied
            reason: Why the value was rejected
        """
        self.parameter = parameter
        self.value = value
        super().__init__(f"Invalid {parameter}={value!r}: {reason}")
