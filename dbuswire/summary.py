"""Serializable summaries of messages and signatures."""

from dataclasses import dataclass
from typing import Any

from dataclasses_json import DataClassJsonMixin

from .proto import DecodeError, Message
from .signature import Signature, SignatureType


@dataclass
class ArgumentInfo(DataClassJsonMixin):
    """One decoded top-level argument.

    When decoding fails, value is None and error holds the reason.
    """

    index: int
    signature: str
    text: str | None
    value: Any
    error: str | None = None


@dataclass
class TypeInfo(DataClassJsonMixin):
    """One complete type of a signature, flattened with its nesting depth."""

    depth: int
    signature: str
    type: str
    alignment: int
    fixed_size: int | None


def summarize(message: Message) -> list[ArgumentInfo]:
    """Decode every top-level argument, recording failures instead of stopping."""
    infos = []
    reader = message.reader()
    index = 0
    while reader.has_next():
        signature = str(reader.signature()[0])
        try:
            arg = next(reader)
        except DecodeError as e:
            infos.append(ArgumentInfo(index, signature, None, None, error=str(e)))
        else:
            infos.append(ArgumentInfo(index, signature, str(arg), arg.unwrap()))
        index += 1
    return infos


def _walk(t: SignatureType, depth: int, infos: list[TypeInfo]) -> None:
    infos.append(TypeInfo(depth, str(t), t.code.name, t.alignment, t.code.fixed_size))
    for member in t.members:
        _walk(member, depth + 1, infos)


def describe_signature(signature: Signature | str) -> list[TypeInfo]:
    """List every type of a signature in depth-first order."""
    infos: list[TypeInfo] = []
    for t in Signature.parse(signature):
        _walk(t, 0, infos)
    return infos
