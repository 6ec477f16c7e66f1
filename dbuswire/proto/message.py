"""Message bodies handed to the decoder."""

from collections.abc import Iterator
from enum import Enum
from typing import TYPE_CHECKING

from ..signature import Signature

if TYPE_CHECKING:
    from .reader import Reader
    from .values import AnyValue


class ByteOrder(Enum):
    """Message byte order, valued by its header marker."""

    LITTLE = "l"
    BIG = "B"

    @classmethod
    def from_marker(cls, marker: str | bytes | int) -> "ByteOrder":
        """Look up the byte order of a header marker, raising ValueError if unknown."""
        if isinstance(marker, int):
            marker = bytes([marker]) if 0 <= marker < 256 else b""
        if isinstance(marker, bytes):
            marker = marker.decode("latin-1")
        for byteorder in cls:
            if byteorder.value == marker:
                return byteorder
        raise ValueError(f"Unknown byte order marker {marker!r}")

    @property
    def struct_prefix(self) -> str:
        return "<" if self is ByteOrder.LITTLE else ">"


class Message:
    """The encoded arguments of a single framed D-Bus message.

    Only the body is held: header parsing and transport are left to the
    caller. Offsets in the body are aligned relative to its first byte.

    Example:
        message = Message("a(is)", body)
        for arg in message:
            print(arg)
    """

    def __init__(
        self,
        signature: Signature | str | bytes,
        body: bytes | bytearray | memoryview,
        byteorder: ByteOrder = ByteOrder.LITTLE,
    ) -> None:
        self._signature = Signature.parse(signature)
        self._body = bytes(body)
        self._byteorder = byteorder

    @property
    def signature(self) -> Signature:
        return self._signature

    @property
    def body(self) -> bytes:
        return self._body

    @property
    def byteorder(self) -> ByteOrder:
        return self._byteorder

    def reader(self) -> "Reader":
        """Create a cursor over the top-level arguments."""
        from .reader import Reader

        return Reader.from_message(self)

    def __iter__(self) -> Iterator["AnyValue"]:
        return iter(self.reader())

    def __repr__(self) -> str:
        return (
            f"Message(signature='{self._signature}', length={len(self._body)}, "
            f"byteorder={self._byteorder.name})"
        )
