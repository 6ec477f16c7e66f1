"""Type definitions for D-Bus signatures.

A signature is a sequence of complete types. Each complete type is either a
single basic type code or a container (array, struct, variant, dict entry)
whose members are themselves complete types.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Self


class ArgType(Enum):
    """Wire type categories, valued by their signature code."""

    INVALID = ""
    BOOLEAN = "b"
    BYTE = "y"
    INT16 = "n"
    INT32 = "i"
    INT64 = "x"
    UINT16 = "q"
    UINT32 = "u"
    UINT64 = "t"
    DOUBLE = "d"
    STRING = "s"
    OBJECT_PATH = "o"
    SIGNATURE = "g"
    ARRAY = "a"
    STRUCT = "("
    VARIANT = "v"
    DICT_ENTRY = "{"
    UNIX_FD = "h"

    @classmethod
    def from_code(cls, code: str) -> "ArgType":
        """Look up a type code, returning INVALID for unknown codes."""
        try:
            return cls(code)
        except ValueError:
            return cls.INVALID

    @property
    def is_basic(self) -> bool:
        return self not in _CONTAINER_TYPES and self is not ArgType.INVALID

    @property
    def is_container(self) -> bool:
        return self in _CONTAINER_TYPES

    @property
    def alignment(self) -> int:
        return _ALIGNMENTS[self]

    @property
    def fixed_size(self) -> int | None:
        """Width in bytes of fixed-size basic types, None for everything else."""
        return _FIXED_SIZES.get(self)


_CONTAINER_TYPES = frozenset([ArgType.ARRAY, ArgType.STRUCT, ArgType.VARIANT, ArgType.DICT_ENTRY])

_ALIGNMENTS: dict[ArgType, int] = {
    ArgType.INVALID: 1,
    ArgType.BOOLEAN: 4,
    ArgType.BYTE: 1,
    ArgType.INT16: 2,
    ArgType.INT32: 4,
    ArgType.INT64: 8,
    ArgType.UINT16: 2,
    ArgType.UINT32: 4,
    ArgType.UINT64: 8,
    ArgType.DOUBLE: 8,
    ArgType.STRING: 4,
    ArgType.OBJECT_PATH: 4,
    ArgType.SIGNATURE: 1,
    ArgType.ARRAY: 4,
    ArgType.STRUCT: 8,
    ArgType.VARIANT: 1,
    ArgType.DICT_ENTRY: 8,
    ArgType.UNIX_FD: 4,
}

_FIXED_SIZES: dict[ArgType, int] = {
    ArgType.BOOLEAN: 4,
    ArgType.BYTE: 1,
    ArgType.INT16: 2,
    ArgType.INT32: 4,
    ArgType.INT64: 8,
    ArgType.UINT16: 2,
    ArgType.UINT32: 4,
    ArgType.UINT64: 8,
    ArgType.DOUBLE: 8,
    ArgType.UNIX_FD: 4,
}


@dataclass(frozen=True, slots=True)
class SignatureType:
    """A single complete type.

    - ARRAY: members holds the element type
    - STRUCT: members holds the fields, possibly none
    - DICT_ENTRY: members holds the key and value types
    """

    code: ArgType
    members: tuple["SignatureType", ...] = ()

    def __str__(self) -> str:
        inner = "".join(str(member) for member in self.members)
        if self.code is ArgType.STRUCT:
            return f"({inner})"
        if self.code is ArgType.DICT_ENTRY:
            return f"{{{inner}}}"
        return self.code.value + inner

    @property
    def alignment(self) -> int:
        return self.code.alignment

    @property
    def element(self) -> "SignatureType":
        """Element type of an array."""
        if self.code is not ArgType.ARRAY:
            raise TypeError(f"{self} is not an array type")
        return self.members[0]


@dataclass(frozen=True, slots=True)
class Signature:
    """An ordered sequence of complete types, immutable once parsed."""

    types: tuple[SignatureType, ...] = ()

    @classmethod
    def parse(cls, text: "str | bytes | Signature") -> Self:
        """Parse a signature string, raising MalformedSignature if it is invalid."""
        if isinstance(text, cls):
            return text

        from .parser import parse

        return cls(parse(text).types)

    @classmethod
    def of(cls, *types: SignatureType) -> Self:
        return cls(tuple(types))

    def __str__(self) -> str:
        return "".join(str(t) for t in self.types)

    def __iter__(self) -> Iterator[SignatureType]:
        return iter(self.types)

    def __len__(self) -> int:
        return len(self.types)

    def __getitem__(self, index: int) -> SignatureType:
        return self.types[index]
