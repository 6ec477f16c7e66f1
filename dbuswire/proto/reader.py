"""Forward-only cursor over the encoded arguments of a D-Bus message."""

import logging
import struct
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any, Self, TypeVar

from ..signature import ArgType, MalformedSignature, Signature, SignatureType, parse
from .errors import (
    DecodeError,
    InvalidType,
    MalformedData,
    TrailingType,
    UnexpectedEnd,
    UnexpectedType,
)
from .readable import ANY, Readable
from .values import AnyValue

if TYPE_CHECKING:
    from .message import Message

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_ARRAY_LENGTH = 1 << 26
MAX_DEPTH = 64

_BASIC_FORMATS: dict[ArgType, str] = {
    ArgType.BOOLEAN: "I",
    ArgType.BYTE: "B",
    ArgType.INT16: "h",
    ArgType.INT32: "i",
    ArgType.INT64: "q",
    ArgType.UINT16: "H",
    ArgType.UINT32: "I",
    ArgType.UINT64: "Q",
    ArgType.DOUBLE: "d",
    ArgType.UNIX_FD: "I",
}


def _align(offset: int, alignment: int) -> int:
    return (offset + alignment - 1) & ~(alignment - 1)


class Reader:
    """A traversal position within one container's encoded arguments.

    A reader walks a fixed sequence of types (the top-level arguments, or the
    members of a struct, dict entry or variant) or the repeated element type
    of an array, which ends at the array's byte length. Positions are never
    revisited.

    Example:
        reader = message.reader()
        while reader.has_next():
            if reader.arg_type() is ArgType.STRING:
                name = reader.consume(STRING)
            else:
                value = reader.consume(ANY)

    Readers hold no state beyond their position and are not thread-safe.
    """

    def __init__(
        self,
        message: "Message",
        types: tuple[SignatureType, ...],
        *,
        element: SignatureType | None = None,
        offset: int = 0,
        end: int | None = None,
        depth: int = 0,
    ) -> None:
        self._message = message
        self._data = memoryview(message.body)
        self._prefix = message.byteorder.struct_prefix
        self._types = types
        self._element = element
        self._index = 0
        self._offset = offset
        self._end = len(self._data) if end is None else end
        self._depth = depth

    @classmethod
    def from_message(cls, message: "Message") -> Self:
        """Create a reader over a message's top-level arguments."""
        return cls(message, message.signature.types)

    @property
    def message(self) -> "Message":
        return self._message

    def has_next(self) -> bool:
        return self._current() is not None

    def arg_type(self) -> ArgType:
        """Wire type of the current argument, INVALID at the end."""
        current = self._current()
        if current is None:
            return ArgType.INVALID
        return current.code

    def element_type(self) -> ArgType:
        """Element type of the current argument if it is an array, else INVALID."""
        current = self._current()
        if current is None or current.code is not ArgType.ARRAY:
            return ArgType.INVALID
        return current.element.code

    def signature(self) -> Signature | None:
        """Signature of the unconsumed arguments at this level, None at the end.

        For array elements this is the element type.
        """
        current = self._current()
        if current is None:
            return None
        if self._element is not None:
            return Signature.of(current)
        return Signature(self._types[self._index :])

    def peek(self, shape: Readable[T]) -> T:
        """Read the current argument as shape without advancing."""
        current = self._current()
        if current is None:
            if shape.signature is None:
                raise InvalidType()
            raise UnexpectedEnd(shape.signature)
        if not shape.accepts(current):
            raise UnexpectedType(shape.signature, self.signature())
        return shape.peek(self)

    def consume(self, shape: Readable[T]) -> T:
        """Read the current argument as shape, then advance.

        The reader advances even when reading fails, so a caller that keeps
        going after an error skips the argument that could not be decoded.
        """
        try:
            return self.peek(shape)
        except DecodeError as e:
            logger.debug("Skipping %s argument after failed read: %s", self.arg_type().name, e)
            raise
        finally:
            self._next()

    def get_basic(self) -> Any:
        """Read the current basic argument.

        Fixed-size types are returned as bool, int or float. Strings, object
        paths and signatures are returned as a memoryview of their bytes,
        borrowed from the message body.
        """
        current = self._current()
        if current is None or not current.code.is_basic:
            raise TypeError(f"Cannot read {self.arg_type().name} argument as a basic value")
        value, _ = self._read_basic(current.code, self._offset)
        return value

    def recurse(self) -> "Reader":
        """Create a reader over the members of the current container argument.

        This reader does not move; consume the container to get past it.
        """
        current = self._current()
        if current is None or not current.code.is_container:
            raise TypeError(f"Cannot recurse into {self.arg_type().name} argument")
        if self._depth >= MAX_DEPTH:
            raise MalformedData(f"Containers nested deeper than {MAX_DEPTH}")

        if current.code is ArgType.ARRAY:
            start, end = self._read_array_header(self._offset, current.element)
            return self._child((), element=current.element, offset=start, end=end)
        if current.code is ArgType.VARIANT:
            inner, offset = self._read_variant_signature(self._offset)
            return self._child((inner,), offset=offset, end=self._end)
        return self._child(current.members, offset=_align(self._offset, 8), end=self._end)

    def terminated(self) -> None:
        """Check that no arguments remain at this level."""
        if self.has_next():
            raise TrailingType(self.signature())

    def __iter__(self) -> Iterator[AnyValue]:
        return self

    def __next__(self) -> AnyValue:
        if not self.has_next():
            raise StopIteration
        return self.consume(ANY)

    def __repr__(self) -> str:
        signature = self.signature() or ""
        return f"Reader(signature='{signature}', offset={self._offset}, depth={self._depth})"

    def _child(
        self,
        types: tuple[SignatureType, ...],
        *,
        element: SignatureType | None = None,
        offset: int,
        end: int,
    ) -> "Reader":
        return Reader(
            self._message,
            types,
            element=element,
            offset=offset,
            end=end,
            depth=self._depth + 1,
        )

    def _current(self) -> SignatureType | None:
        if self._element is not None:
            if _align(self._offset, self._element.alignment) < self._end:
                return self._element
            return None
        if self._index < len(self._types):
            return self._types[self._index]
        return None

    def _next(self) -> None:
        current = self._current()
        if current is None:
            return

        try:
            offset = self._skip(current, self._offset, self._depth)
        except DecodeError as e:
            logger.warning("Abandoning remaining arguments of %r: %s", self, e)
            self._exhaust()
            return

        if self._element is None:
            self._index += 1
        elif offset <= _align(self._offset, self._element.alignment):
            logger.warning("Abandoning array of zero-width %s elements", self._element)
            self._exhaust()
            return
        self._offset = offset

    def _exhaust(self) -> None:
        self._index = len(self._types)
        self._offset = self._end

    def _require(self, offset: int, count: int) -> None:
        if offset + count > self._end:
            available = max(0, self._end - offset)
            raise MalformedData(
                f"Data truncated: expected {count} bytes at offset {offset} "
                f"but {available} available"
            )

    def _read_uint32(self, offset: int) -> tuple[int, int]:
        offset = _align(offset, 4)
        self._require(offset, 4)
        (value,) = struct.unpack_from(self._prefix + "I", self._data, offset)
        return value, offset + 4

    def _read_basic(self, code: ArgType, offset: int) -> tuple[Any, int]:
        """Read a basic value, returning it and the offset just past it."""
        fmt = _BASIC_FORMATS.get(code)
        if fmt is not None:
            offset = _align(offset, code.alignment)
            size = code.fixed_size
            self._require(offset, size)
            (value,) = struct.unpack_from(self._prefix + fmt, self._data, offset)
            if code is ArgType.BOOLEAN:
                if value > 1:
                    raise MalformedData(f"Boolean at offset {offset} has value {value}")
                value = bool(value)
            return value, offset + size

        if code is ArgType.SIGNATURE:
            self._require(offset, 1)
            length = self._data[offset]
            start = offset + 1
        else:
            length, start = self._read_uint32(offset)

        self._require(start, length + 1)
        if self._data[start + length] != 0:
            raise MalformedData(f"{code.name} at offset {start} is not NUL-terminated")
        return self._data[start : start + length], start + length + 1

    def _read_array_header(self, offset: int, element: SignatureType) -> tuple[int, int]:
        """Read an array length, returning the offsets of its first element and its end."""
        length, offset = self._read_uint32(offset)
        if length > MAX_ARRAY_LENGTH:
            raise MalformedData(f"Array length {length} exceeds {MAX_ARRAY_LENGTH}")

        start = _align(offset, element.alignment)
        end = start + length
        if end > self._end:
            raise MalformedData(f"Array of {length} bytes at offset {start} overruns its container")
        return start, end

    def _read_variant_signature(self, offset: int) -> tuple[SignatureType, int]:
        raw, offset = self._read_basic(ArgType.SIGNATURE, offset)
        try:
            signature = parse(bytes(raw))
        except MalformedSignature as e:
            raise MalformedData(f"Invalid variant signature: {e}") from e
        if len(signature) != 1:
            raise MalformedData(f"Variant signature `{signature}` is not a single complete type")
        return signature[0], offset

    def _skip(self, t: SignatureType, offset: int, depth: int) -> int:
        """Return the offset just past a value of type t."""
        size = t.code.fixed_size
        if size is not None:
            offset = _align(offset, t.alignment)
            self._require(offset, size)
            return offset + size
        if t.code.is_basic:
            _, offset = self._read_basic(t.code, offset)
            return offset
        if t.code is ArgType.ARRAY:
            _, end = self._read_array_header(offset, t.element)
            return end
        if depth >= MAX_DEPTH:
            raise MalformedData(f"Containers nested deeper than {MAX_DEPTH}")
        if t.code is ArgType.VARIANT:
            inner, offset = self._read_variant_signature(offset)
            return self._skip(inner, offset, depth + 1)

        offset = _align(offset, 8)
        for member in t.members:
            offset = self._skip(member, offset, depth + 1)
        return offset
