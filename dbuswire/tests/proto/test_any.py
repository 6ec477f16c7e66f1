"""Tests for schema-less decoding into AnyValue."""

from pytest import raises

from dbuswire.proto import (
    ANY,
    AnyValue,
    ObjectPath,
    Reader,
    TextDecodeError,
    UnexpectedType,
    UnixFd,
)
from dbuswire.signature import ArgType, Signature, SignatureType
from dbuswire.tests.wire import message


def decode(signature, *values):
    return message(signature, *values).reader().consume(ANY)


def describe_decoding():
    def decodes_basic_values(expect):
        values = list(message("bsogh", False, "s", "/p", "a(ii)", 4))
        expect([value.arg_type for value in values]) == [
            ArgType.BOOLEAN,
            ArgType.STRING,
            ArgType.OBJECT_PATH,
            ArgType.SIGNATURE,
            ArgType.UNIX_FD,
        ]
        expect(values[2].value) == ObjectPath("/p")
        expect(values[3].value) == Signature.parse("a(ii)")
        expect(values[4].value) == UnixFd(4)

    def decodes_arrays(expect):
        value = decode("ai", [1, 2, 3])
        expect(value.arg_type) == ArgType.ARRAY
        expect(str(value.element)) == "i"
        expect([child.arg_type for child in value.value]) == [ArgType.INT32] * 3
        expect([child.value for child in value.value]) == [1, 2, 3]

    def decodes_empty_arrays(expect):
        value = decode("a(is)", [])
        expect(value.value) == ()
        expect(str(value.signature)) == "a(is)"

    def decodes_structs(expect):
        value = decode("(is)", (42, "ok"))
        expect(value) == AnyValue(
            ArgType.STRUCT, (AnyValue(ArgType.INT32, 42), AnyValue(ArgType.STRING, "ok"))
        )

    def decodes_variants(expect):
        value = decode("v", ("ai", [5]))
        expect(value.arg_type) == ArgType.VARIANT
        expect(value.value.arg_type) == ArgType.ARRAY
        expect(str(value.signature)) == "v"

    def decodes_dict_entries(expect):
        value = decode("a{sv}", [("a", ("i", 1))])
        entry = value.value[0]
        expect(entry.arg_type) == ArgType.DICT_ENTRY
        key, item = entry.value
        expect(key) == AnyValue(ArgType.STRING, "a")
        expect(item) == AnyValue(ArgType.VARIANT, AnyValue(ArgType.INT32, 1))

    def decodes_nested_containers(expect):
        value = decode("a{oa{sa{sv}}}", [("/o", [("iface", [("prop", ("b", True))])])])
        expect(str(value.signature)) == "a{oa{sa{sv}}}"
        expect(value.unwrap()) == {"/o": {"iface": {"prop": True}}}

    def signature_matches_wire_type(expect):
        for signature, value in [
            ("y", 1),
            ("(yv)", (1, ("s", "x"))),
            ("aai", [[1], []]),
            ("a{ys}", [(1, "x")]),
        ]:
            expect(str(decode(signature, value).signature)) == signature

    def propagates_text_errors(expect):
        with raises(TextDecodeError):
            decode("as", [b"\xff"])


def describe_array_homogeneity():
    def rejects_heterogeneous_elements(expect, monkeypatch):
        array_message = message("ai", [1, 2])
        mixed_message = message("is", 7, "x")
        recurse = Reader.recurse

        def mixed_recurse(self):
            if self.arg_type() is ArgType.ARRAY:
                return mixed_message.reader()
            return recurse(self)

        monkeypatch.setattr(Reader, "recurse", mixed_recurse)

        with raises(UnexpectedType) as exinfo:
            array_message.reader().consume(ANY)

        expect(str(exinfo.value.expected)) == "i"
        expect(str(exinfo.value.actual)) == "s"


def describe_unwrap():
    def unwraps_to_plain_python(expect):
        expect(decode("(ias)", (1, ["a"])).unwrap()) == (1, ["a"])
        expect(decode("a{sv}", [("a", ("i", 1)), ("b", ("s", "x"))]).unwrap()) == {
            "a": 1,
            "b": "x",
        }
        expect(decode("o", "/p").unwrap()) == "/p"
        expect(decode("g", "ai").unwrap()) == "ai"
        expect(decode("h", 2).unwrap()) == 2


def describe_text_format():
    def formats_basic_values(expect):
        expect(str(decode("i", -4))) == "-4"
        expect(str(decode("u", 4))) == "uint32 4"
        expect(str(decode("y", 42))) == "0x2a"
        expect(str(decode("b", True))) == "true"
        expect(str(decode("s", 'say "hi"'))) == '"say \\"hi\\""'
        expect(str(decode("o", "/p"))) == "objectpath '/p'"
        expect(str(decode("h", 1))) == "handle 1"

    def formats_containers(expect):
        expect(str(decode("ai", [1, 2]))) == "[1, 2]"
        expect(str(decode("as", []))) == "@as []"
        value = decode("(yuob)", (1, 7, "/a", False))
        expect(str(value)) == "(0x01, uint32 7, objectpath '/a', false)"
        expect(str(decode("a{sv}", [("a", ("i", 1)), ("b", ("s", "x"))]))) == (
            '{"a": <1>, "b": <"x">}'
        )


def describe_signature():
    def builds_complete_type(expect):
        value = AnyValue(ArgType.ARRAY, (), SignatureType(ArgType.INT32))
        expect(value.signature) == Signature.parse("ai")[0]
