"""Decoded value types for D-Bus arguments."""

import json
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from ..signature import ArgType, SignatureType

T = TypeVar("T")
K = TypeVar("K")
V = TypeVar("V")


class ObjectPath(str):
    """An object path argument (wire type `o`)."""

    __slots__ = ()

    def __repr__(self) -> str:
        return f"ObjectPath({str.__repr__(self)})"


@dataclass(frozen=True, slots=True)
class UnixFd:
    """A file descriptor argument, as its index into the message's fd list."""

    index: int


@dataclass(frozen=True, slots=True)
class Variant(Generic[T]):
    """A value decoded from a variant container."""

    value: T


@dataclass(frozen=True, slots=True)
class DictEntry(Generic[K, V]):
    """A key/value pair decoded from a dict entry container."""

    key: K
    value: V


# GVariant text format prefixes for types that are ambiguous without one
_PREFIXES: dict[ArgType, str] = {
    ArgType.INT16: "int16 ",
    ArgType.UINT16: "uint16 ",
    ArgType.UINT32: "uint32 ",
    ArgType.INT64: "int64 ",
    ArgType.UINT64: "uint64 ",
    ArgType.OBJECT_PATH: "objectpath ",
    ArgType.SIGNATURE: "signature ",
    ArgType.UNIX_FD: "handle ",
}


@dataclass(frozen=True, slots=True)
class AnyValue:
    """A decoded argument of any wire type.

    The payload depends on arg_type:
    - basic types: the Python value (bool, int, float, str, ObjectPath,
      Signature or UnixFd)
    - ARRAY: tuple of AnyValue children; element holds the element type
    - STRUCT: tuple of AnyValue children
    - VARIANT: the wrapped AnyValue
    - DICT_ENTRY: (key, value) tuple of AnyValue
    """

    arg_type: ArgType
    value: Any
    element: SignatureType | None = None

    @property
    def signature(self) -> SignatureType:
        """The complete type of this value."""
        if self.arg_type is ArgType.ARRAY:
            assert self.element is not None
            return SignatureType(ArgType.ARRAY, (self.element,))
        if self.arg_type in (ArgType.STRUCT, ArgType.DICT_ENTRY):
            return SignatureType(self.arg_type, tuple(child.signature for child in self.value))
        return SignatureType(self.arg_type)

    def unwrap(self) -> Any:
        """Convert to plain Python values.

        Arrays of dict entries become dicts, other arrays lists, structs and
        dict entries tuples. Variants unwrap to their content.
        """
        if self.arg_type is ArgType.ARRAY:
            if self.element is not None and self.element.code is ArgType.DICT_ENTRY:
                return dict(child.unwrap() for child in self.value)
            return [child.unwrap() for child in self.value]
        if self.arg_type in (ArgType.STRUCT, ArgType.DICT_ENTRY):
            return tuple(child.unwrap() for child in self.value)
        if self.arg_type is ArgType.VARIANT:
            return self.value.unwrap()
        if self.arg_type is ArgType.OBJECT_PATH:
            return str(self.value)
        if self.arg_type is ArgType.SIGNATURE:
            return str(self.value)
        if self.arg_type is ArgType.UNIX_FD:
            return self.value.index
        return self.value

    def __str__(self) -> str:
        code = self.arg_type
        if code is ArgType.ARRAY:
            if not self.value:
                return f"@a{self.element} []"
            if self.element is not None and self.element.code is ArgType.DICT_ENTRY:
                entries = ", ".join(f"{k}: {v}" for k, v in (child.value for child in self.value))
                return f"{{{entries}}}"
            return "[" + ", ".join(str(child) for child in self.value) + "]"
        if code is ArgType.STRUCT:
            return "(" + ", ".join(str(child) for child in self.value) + ")"
        if code is ArgType.VARIANT:
            return f"<{self.value}>"
        if code is ArgType.DICT_ENTRY:
            key, value = self.value
            return f"{{{key}: {value}}}"
        if code is ArgType.BOOLEAN:
            return "true" if self.value else "false"
        if code is ArgType.STRING:
            return json.dumps(self.value, ensure_ascii=False)
        if code in (ArgType.OBJECT_PATH, ArgType.SIGNATURE):
            return f"{_PREFIXES[code]}'{self.value}'"
        if code is ArgType.UNIX_FD:
            return f"{_PREFIXES[code]}{self.value.index}"
        if code is ArgType.BYTE:
            return f"0x{self.value:02x}"
        return _PREFIXES.get(code, "") + repr(self.value)
