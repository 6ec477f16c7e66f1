"""Tests for message bodies and byte order markers."""

import pytest
from pytest import raises

from dbuswire.proto import ByteOrder, Message
from dbuswire.signature import Signature


def describe_byte_order():
    @pytest.mark.parametrize(
        "marker, byteorder",
        [
            ("l", ByteOrder.LITTLE),
            ("B", ByteOrder.BIG),
            (b"l", ByteOrder.LITTLE),
            (b"B", ByteOrder.BIG),
            (0x6C, ByteOrder.LITTLE),
            (0x42, ByteOrder.BIG),
        ],
    )
    def reads_header_markers(expect, marker, byteorder):
        expect(ByteOrder.from_marker(marker)) == byteorder

    @pytest.mark.parametrize("marker", ["L", "b", "", "lB", b"\xff", b"", 0xFF, 300, -1])
    def rejects_unknown_markers(expect, marker):
        with raises(ValueError) as exinfo:
            ByteOrder.from_marker(marker)

        expect(str(exinfo.value)).includes("Unknown byte order marker")

    def maps_to_struct_prefixes(expect):
        expect(ByteOrder.LITTLE.struct_prefix) == "<"
        expect(ByteOrder.BIG.struct_prefix) == ">"


def describe_message():
    def parses_signature_and_copies_body(expect):
        body = bytearray(b"\x07\x00\x00\x00")
        message = Message("i", body, ByteOrder.from_marker(b"l"))
        body[0] = 0

        expect(message.signature) == Signature.parse("i")
        expect(message.body) == b"\x07\x00\x00\x00"
        expect(message.byteorder) == ByteOrder.LITTLE
        expect([arg.unwrap() for arg in message]) == [7]

    def reports_summary_in_repr(expect):
        message = Message("as", b"\x00\x00\x00\x00", ByteOrder.BIG)
        expect(repr(message)) == "Message(signature='as', length=4, byteorder=BIG)"
