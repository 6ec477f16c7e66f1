"""D-Bus signature parser using Lark."""

import os
from typing import Any

from lark import Lark
from lark.exceptions import UnexpectedInput
from lark.visitors import Transformer

from .types import ArgType, Signature, SignatureType

MAX_SIGNATURE_LENGTH = 255
MAX_ARRAY_DEPTH = 32
MAX_STRUCT_DEPTH = 32

_g_parser: Lark | None = None


class MalformedSignature(RuntimeError):
    """Raised when a signature string is not a well-formed sequence of types."""

    def __init__(self, signature: str, reason: str) -> None:
        super().__init__(f"Malformed signature `{signature}`: {reason}")
        self.signature = signature
        self.reason = reason


class TreeTransformer(Transformer):
    """Transform parse tree into signature types."""

    def start(self, args: list[Any]) -> Signature:
        return Signature(tuple(args))

    def basic(self, args: list[Any]) -> SignatureType:
        return SignatureType(ArgType(str(args[0])))

    def variant(self, _args: list[Any]) -> SignatureType:
        return SignatureType(ArgType.VARIANT)

    def array(self, args: list[Any]) -> SignatureType:
        return SignatureType(ArgType.ARRAY, (args[0],))

    def struct(self, args: list[Any]) -> SignatureType:
        return SignatureType(ArgType.STRUCT, tuple(args))

    def dict_entry(self, args: list[Any]) -> SignatureType:
        return SignatureType(ArgType.DICT_ENTRY, (args[0], args[1]))


def _depths(t: SignatureType) -> tuple[int, int]:
    """Return the (array, struct) nesting depth of a complete type."""
    arrays = structs = 0
    for member in t.members:
        member_arrays, member_structs = _depths(member)
        arrays = max(arrays, member_arrays)
        structs = max(structs, member_structs)

    if t.code is ArgType.ARRAY:
        arrays += 1
    elif t.code in (ArgType.STRUCT, ArgType.DICT_ENTRY):
        structs += 1
    return arrays, structs


def validate(text: str, signature: Signature) -> None:
    """Validate nesting limits of a parsed signature."""
    for t in signature:
        arrays, structs = _depths(t)
        if arrays > MAX_ARRAY_DEPTH:
            raise MalformedSignature(text, f"arrays nested deeper than {MAX_ARRAY_DEPTH}")
        if structs > MAX_STRUCT_DEPTH:
            raise MalformedSignature(text, f"structs nested deeper than {MAX_STRUCT_DEPTH}")


def parse(text: str | bytes) -> Signature:
    """Parse a D-Bus signature."""
    global _g_parser

    if isinstance(text, bytes | bytearray | memoryview):
        try:
            text = bytes(text).decode("ascii")
        except UnicodeDecodeError as e:
            raise MalformedSignature(repr(bytes(text)), "not ASCII") from e

    if len(text) > MAX_SIGNATURE_LENGTH:
        raise MalformedSignature(text, f"longer than {MAX_SIGNATURE_LENGTH} bytes")

    if not _g_parser:
        with open(f"{os.path.dirname(__file__)}/signature.lark", encoding="utf-8") as f:
            grammar = f.read()

        # The transformer runs on each reduction, so deep nesting never
        # recurses through the tree.
        _g_parser = Lark(grammar, parser="lalr", transformer=TreeTransformer())

    try:
        signature = _g_parser.parse(text)
    except UnexpectedInput as e:
        raise MalformedSignature(text, f"unexpected input at position {e.pos_in_stream}") from e

    validate(text, signature)
    return signature
