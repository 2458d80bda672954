"""
TBURN Exceptions

Custom exception classes for the ranking and tokenomics engine.
"""


class TBURNException(Exception):
    """Base exception for the TBURN engine."""
    pass


class InvalidAmount(TBURNException, ValueError):
    """A stake amount cannot be parsed as a non-negative integer."""

    def __init__(self, value, reason: str = None):
        self.value = value
        self.reason = reason or "not a non-negative integer"
        super().__init__(f"Invalid amount {value!r}: {self.reason}")


class DuplicateValidator(TBURNException):
    """Two validator records share the same address."""

    def __init__(self, address: str):
        self.address = address
        super().__init__(f"Duplicate validator address: {address}")


class InvalidValidatorRecord(TBURNException):
    """A validator payload is missing required fields or has bad values."""
    pass


class MalformedEvent(TBURNException):
    """A live-update payload could not be parsed."""
    pass


class RegistryError(TBURNException):
    """The validator registry returned an unusable response."""
    pass


class ConfigurationError(TBURNException):
    """Configuration error."""
    pass
