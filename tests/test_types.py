import datetime

import pytest

from api_doc_builder.service.types import (
    ANY,
    BOOL,
    BYTE,
    DATE,
    DATETIME,
    FLOAT64,
    INT,
    INT8,
    STRING,
    UINT8,
    Array,
    Kind,
    Map,
    Pointer,
    Primitive,
    Struct,
    coerce_literal,
    describe,
    is_bytes,
    unwrap_pointer,
)
from api_doc_builder.spec.errors import ErrorKind, UnclassifiableTypeError


class TestDescriptors:
    def test_type_strings(self):
        user = Struct("main.User")
        assert user.type_string() == "main.User"
        assert Array(user).type_string() == "[]main.User"
        assert Map(INT).type_string() == "map[string]int"
        assert Pointer(user).type_string() == "*main.User"
        assert Primitive("int", name="main.UID").type_string() == "main.UID"
        assert ANY.type_string() == "interface {}"

    def test_anonymous_struct_type_string(self):
        anon = Struct().add("A", INT).add("B", STRING)
        assert anon.type_string() == "struct{A,B}"

    def test_unknown_primitive(self):
        with pytest.raises(UnclassifiableTypeError):
            Primitive("complex128")

    def test_self_reference(self):
        node = Struct("main.Node")
        node.add("Children", Array(node), json_name="children")
        assert node.fields[0].type.elem is node
        assert node.fields[0].meta.json_name == "children"

    def test_embed_uses_short_name(self):
        base = Struct("main.Base").add("ID", INT)
        outer = Struct("main.Outer").embed(base)
        assert outer.fields[0].name == "Base"
        assert outer.fields[0].embedded is True

    def test_unwrap_pointer(self):
        assert unwrap_pointer(Pointer(Pointer(INT))) is INT
        assert Pointer(INT).kind == Kind.POINTER

    def test_is_bytes(self):
        assert is_bytes(Array(BYTE))
        assert is_bytes(Array(UINT8))
        assert not is_bytes(Array(INT8))
        assert not is_bytes(BYTE)


class TestDescribe:
    def test_scalars(self):
        assert describe(True) is BOOL
        assert describe(0) is INT
        assert describe(1.5) is FLOAT64
        assert describe("x") is STRING
        assert describe(datetime.datetime(2024, 1, 1)) is DATETIME
        assert describe(datetime.date(2024, 1, 1)) is DATE

    def test_bytes(self):
        assert is_bytes(describe(b"abc"))

    def test_containers(self):
        assert describe(["a"]).elem is STRING
        assert describe({"k": 1}).value is INT
        assert describe({}).value is ANY

    def test_descriptor_passes_through(self):
        user = Struct("main.User")
        assert describe(user) is user

    def test_empty_list_is_unclassifiable(self):
        with pytest.raises(UnclassifiableTypeError):
            describe([])

    def test_unknown_object(self):
        with pytest.raises(UnclassifiableTypeError) as exc:
            describe(object())
        assert exc.value.kind == ErrorKind.UNCLASSIFIABLE_TYPE


class TestCoerceLiteral:
    def test_integers(self):
        assert coerce_literal(INT, "21") == 21
        assert coerce_literal(INT, "0x10") == 16
        assert coerce_literal(INT8, "200") is None
        assert coerce_literal(UINT8, "-1") is None
        assert coerce_literal(INT, "abc") is None

    def test_floats_and_bools(self):
        assert coerce_literal(FLOAT64, "1.5") == 1.5
        assert coerce_literal(BOOL, "true") is True
        assert coerce_literal(BOOL, "0") is False
        assert coerce_literal(BOOL, "maybe") is None

    def test_strings_and_pointers(self):
        assert coerce_literal(STRING, "john") == "john"
        assert coerce_literal(Pointer(INT), "3") == 3

    def test_non_text_passes_through(self):
        assert coerce_literal(INT, 5) == 5

    def test_struct_text_is_dropped(self):
        assert coerce_literal(Struct("main.User"), "x") is None
