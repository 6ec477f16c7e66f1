"""Errors raised while decoding message arguments."""

from ..signature import Signature


class DecodeError(RuntimeError):
    """Base exception for argument decode failures."""


class InvalidType(DecodeError):
    """Raised when the end-of-arguments sentinel is read as a value."""

    def __init__(self) -> None:
        super().__init__("Invalid type.")


class UnexpectedType(DecodeError):
    """Raised when the wire type is incompatible with the requested shape."""

    def __init__(self, expected: Signature | None, actual: Signature | None) -> None:
        super().__init__(f"Expected type `{expected}` but got `{actual}`.")
        self.expected = expected
        self.actual = actual


class TrailingType(DecodeError):
    """Raised when a container holds more members than were read."""

    def __init__(self, actual: Signature | None) -> None:
        super().__init__(f"Trailing type `{actual}` found.")
        self.actual = actual


class UnexpectedEnd(DecodeError):
    """Raised when a container runs out of members before a required one."""

    def __init__(self, expected: Signature) -> None:
        super().__init__(f"Expected type `{expected}` but nothing else.")
        self.expected = expected


class TextDecodeError(DecodeError):
    """Raised when a string payload is not valid UTF-8."""


class NulError(DecodeError):
    """Raised when a C string payload contains an interior NUL byte."""


class MalformedData(DecodeError):
    """Raised when the encoded bytes do not match their declared signature."""
