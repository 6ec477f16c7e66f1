"""Target shapes that arguments can be decoded into.

A shape pairs the signature it accepts with a function that reads a value
from a reader positioned on a compatible argument. The reader only talks to
shapes through the Readable protocol, so new shapes can be added without
touching it:

    @dataclass(frozen=True)
    class Point:
        x: int
        y: int

    POINT = StructOf(INT32, INT32, into=Point)
    points = reader.consume(ArrayOf(POINT))
"""

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, Protocol, TypeVar, runtime_checkable

from ..signature import ArgType, MalformedSignature, Signature, SignatureType
from .errors import MalformedData, NulError, TextDecodeError, UnexpectedType
from .values import AnyValue, DictEntry, ObjectPath, UnixFd, Variant

if TYPE_CHECKING:
    from .reader import Reader

__all__ = [
    "ANY",
    "BOOLEAN",
    "BYTE",
    "CSTRING",
    "DOUBLE",
    "INT16",
    "INT32",
    "INT64",
    "OBJECT_PATH",
    "SIGNATURE",
    "STRING",
    "UINT16",
    "UINT32",
    "UINT64",
    "UNIT",
    "UNIX_FD",
    "ArrayOf",
    "Basic",
    "DictEntryOf",
    "DictOf",
    "Readable",
    "StructOf",
    "Text",
    "VariantOf",
]

T = TypeVar("T")
K = TypeVar("K")
V = TypeVar("V")
T_co = TypeVar("T_co", covariant=True)


@runtime_checkable
class Readable(Protocol[T_co]):
    """The decode contract for a target shape.

    signature: the wire signature the shape expects, used in diagnostics.
        None for shapes that accept any type.
    accepts: whether the shape can read an argument of the given type.
    peek: read the value at the reader's current position without
        advancing it. Only called after accepts() returned True.
    """

    @property
    def signature(self) -> Signature | None: ...

    def accepts(self, type_: SignatureType) -> bool: ...

    def peek(self, reader: "Reader") -> T_co: ...


def _single(shape: Readable[Any]) -> SignatureType:
    # Shapes without a signature accept anything, shown as a variant
    if shape.signature is None:
        return SignatureType(ArgType.VARIANT)
    return shape.signature[0]


class Basic(Generic[T]):
    """A fixed-size basic type, optionally converted after reading."""

    def __init__(self, arg_type: ArgType, convert: Callable[[Any], T] | None = None) -> None:
        self.arg_type = arg_type
        self.signature = Signature.of(SignatureType(arg_type))
        self._convert = convert

    def accepts(self, type_: SignatureType) -> bool:
        return type_.code is self.arg_type

    def peek(self, reader: "Reader") -> T:
        value = reader.get_basic()
        if self._convert is not None:
            return self._convert(value)
        return value

    def __repr__(self) -> str:
        return f"Basic('{self.signature}')"


class Text(Generic[T]):
    """A length-prefixed string type, converted from its raw bytes."""

    def __init__(self, arg_types: tuple[ArgType, ...], convert: Callable[[memoryview], T]) -> None:
        self.arg_types = arg_types
        self.signature = Signature.of(SignatureType(arg_types[0]))
        self._convert = convert

    def accepts(self, type_: SignatureType) -> bool:
        return type_.code in self.arg_types

    def peek(self, reader: "Reader") -> T:
        return self._convert(reader.get_basic())

    def __repr__(self) -> str:
        return f"Text('{self.signature}')"


_OBJECT_PATH_RE = re.compile(r"/|(/[A-Za-z0-9_]+)+")


def _cstring(raw: memoryview) -> bytes:
    data = bytes(raw)
    position = data.find(0)
    if position != -1:
        raise NulError(f"Interior NUL byte found at position {position}")
    return data


def _utf8(raw: memoryview) -> str:
    data = _cstring(raw)
    try:
        return str(data, "utf-8")
    except UnicodeDecodeError as e:
        raise TextDecodeError(f"String is not valid UTF-8: {e}") from e


def _object_path(raw: memoryview) -> ObjectPath:
    path = _utf8(raw)
    if not _OBJECT_PATH_RE.fullmatch(path):
        raise MalformedData(f"Invalid object path {path!r}")
    return ObjectPath(path)


def _signature(raw: memoryview) -> Signature:
    try:
        return Signature.parse(bytes(raw))
    except MalformedSignature as e:
        raise MalformedData(str(e)) from e


BOOLEAN: Basic[bool] = Basic(ArgType.BOOLEAN)
BYTE: Basic[int] = Basic(ArgType.BYTE)
INT16: Basic[int] = Basic(ArgType.INT16)
INT32: Basic[int] = Basic(ArgType.INT32)
INT64: Basic[int] = Basic(ArgType.INT64)
UINT16: Basic[int] = Basic(ArgType.UINT16)
UINT32: Basic[int] = Basic(ArgType.UINT32)
UINT64: Basic[int] = Basic(ArgType.UINT64)
DOUBLE: Basic[float] = Basic(ArgType.DOUBLE)
UNIX_FD: Basic[UnixFd] = Basic(ArgType.UNIX_FD, UnixFd)

STRING: Text[str] = Text((ArgType.STRING, ArgType.OBJECT_PATH), _utf8)
OBJECT_PATH: Text[ObjectPath] = Text((ArgType.OBJECT_PATH,), _object_path)
CSTRING: Text[bytes] = Text((ArgType.STRING, ArgType.OBJECT_PATH), _cstring)
SIGNATURE: Text[Signature] = Text((ArgType.SIGNATURE,), _signature)


@dataclass(frozen=True, slots=True)
class ArrayOf(Generic[T]):
    """An array, decoded into a list in wire order."""

    element: Readable[T]

    @property
    def signature(self) -> Signature:
        return Signature.of(SignatureType(ArgType.ARRAY, (_single(self.element),)))

    def accepts(self, type_: SignatureType) -> bool:
        return type_.code is ArgType.ARRAY and self.element.accepts(type_.element)

    def peek(self, reader: "Reader") -> list[T]:
        array_reader = reader.recurse()
        elements = []
        while array_reader.has_next():
            elements.append(array_reader.consume(self.element))
        return elements


@dataclass(frozen=True, slots=True, init=False)
class StructOf:
    """A struct with a fixed number of fields.

    Decodes into a tuple, or into into(*fields) when a factory is given.
    A struct with more fields than members fails with TrailingType.
    """

    members: tuple[Readable[Any], ...]
    into: Callable[..., Any] | None

    def __init__(self, *members: Readable[Any], into: Callable[..., Any] | None = None) -> None:
        object.__setattr__(self, "members", members)
        object.__setattr__(self, "into", into)

    @property
    def signature(self) -> Signature:
        return Signature.of(SignatureType(ArgType.STRUCT, tuple(_single(m) for m in self.members)))

    def accepts(self, type_: SignatureType) -> bool:
        return type_.code is ArgType.STRUCT

    def peek(self, reader: "Reader") -> Any:
        sub_reader = reader.recurse()
        values = tuple(sub_reader.consume(member) for member in self.members)
        sub_reader.terminated()
        if self.into is not None:
            return self.into(*values)
        return values


UNIT = StructOf()


@dataclass(frozen=True, slots=True)
class VariantOf(Generic[T]):
    """A variant whose content must match the inner shape."""

    inner: Readable[T]

    @property
    def signature(self) -> Signature:
        return Signature.of(SignatureType(ArgType.VARIANT))

    def accepts(self, type_: SignatureType) -> bool:
        return type_.code is ArgType.VARIANT

    def peek(self, reader: "Reader") -> Variant[T]:
        return Variant(reader.recurse().peek(self.inner))


@dataclass(frozen=True, slots=True)
class DictEntryOf(Generic[K, V]):
    """A single dict entry."""

    key: Readable[K]
    value: Readable[V]

    @property
    def signature(self) -> Signature:
        return Signature.of(
            SignatureType(ArgType.DICT_ENTRY, (_single(self.key), _single(self.value)))
        )

    def accepts(self, type_: SignatureType) -> bool:
        return (
            type_.code is ArgType.DICT_ENTRY
            and self.key.accepts(type_.members[0])
            and self.value.accepts(type_.members[1])
        )

    def peek(self, reader: "Reader") -> DictEntry[K, V]:
        sub_reader = reader.recurse()
        key = sub_reader.consume(self.key)
        value = sub_reader.consume(self.value)
        sub_reader.terminated()
        return DictEntry(key, value)


@dataclass(frozen=True, slots=True)
class DictOf(Generic[K, V]):
    """An array of dict entries, decoded into a dict."""

    key: Readable[K]
    value: Readable[V]

    @property
    def signature(self) -> Signature:
        return ArrayOf(DictEntryOf(self.key, self.value)).signature

    def accepts(self, type_: SignatureType) -> bool:
        return ArrayOf(DictEntryOf(self.key, self.value)).accepts(type_)

    def peek(self, reader: "Reader") -> dict[K, V]:
        entries = ArrayOf(DictEntryOf(self.key, self.value)).peek(reader)
        return {entry.key: entry.value for entry in entries}


class _AnyShape:
    """Decodes any argument into an AnyValue."""

    signature = None

    def accepts(self, type_: SignatureType) -> bool:
        return type_.code is not ArgType.INVALID

    def peek(self, reader: "Reader") -> AnyValue:
        arg_type = reader.arg_type()

        if arg_type in _BASIC_SHAPES:
            return AnyValue(arg_type, reader.peek(_BASIC_SHAPES[arg_type]))

        if arg_type is ArgType.ARRAY:
            element = reader.signature()[0].element
            expected = Signature.of(element)
            values = []
            array_reader = reader.recurse()
            while array_reader.has_next():
                value = array_reader.consume(self)
                if value.signature != element:
                    raise UnexpectedType(expected, Signature.of(value.signature))
                values.append(value)
            array_reader.terminated()
            return AnyValue(arg_type, tuple(values), element)

        if arg_type in (ArgType.STRUCT, ArgType.DICT_ENTRY):
            values = []
            sub_reader = reader.recurse()
            while sub_reader.has_next():
                values.append(sub_reader.consume(self))
            sub_reader.terminated()
            return AnyValue(arg_type, tuple(values))

        if arg_type is ArgType.VARIANT:
            return AnyValue(arg_type, reader.recurse().peek(self))

        # Reader.peek never hands the sentinel to a shape
        raise AssertionError(f"Unhandled argument type {arg_type}")

    def __repr__(self) -> str:
        return "ANY"


ANY = _AnyShape()

_BASIC_SHAPES: dict[ArgType, Readable[Any]] = {
    ArgType.BOOLEAN: BOOLEAN,
    ArgType.BYTE: BYTE,
    ArgType.INT16: INT16,
    ArgType.INT32: INT32,
    ArgType.INT64: INT64,
    ArgType.UINT16: UINT16,
    ArgType.UINT32: UINT32,
    ArgType.UINT64: UINT64,
    ArgType.DOUBLE: DOUBLE,
    ArgType.STRING: STRING,
    ArgType.OBJECT_PATH: OBJECT_PATH,
    ArgType.SIGNATURE: SIGNATURE,
    ArgType.UNIX_FD: UNIX_FD,
}
