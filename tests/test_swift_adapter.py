import os
import sys
from textwrap import dedent

import pytest

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from adapters.swift_adapter import SwiftAdapter

adapter = SwiftAdapter()


def declarations(code, filename=None):
    return [u.declaration for u in adapter.parse_units(code, filename)]


def members_by_name(decl):
    return {m.name: m for m in decl.members}


def test_basic_struct_members():
    code = dedent("""\
        @ProtocolMirror
        struct APIClient {
          var fetchUser: (Int) async throws -> User
          var saveUser: (User) async throws -> Void
          var config: Config
        }
        """)
    decls = declarations(code, "APIClient.swift")

    assert len(decls) == 1
    decl = decls[0]
    assert decl.name == "APIClient"
    assert decl.kind == "record"
    assert decl.keyword == "struct"
    assert decl.visibility == "internal"
    assert decl.attributes == ("ProtocolMirror",)
    assert (decl.location.line, decl.location.column) == (1, 1)
    assert decl.location.file == "APIClient.swift"

    assert [m.name for m in decl.members] == ["fetchUser", "saveUser", "config"]
    fetch = decl.members[0]
    assert fetch.type_annotation == "(Int) async throws -> User"
    assert fetch.storage == "mutable"
    assert fetch.initializer is None
    assert (fetch.location.line, fetch.location.column) == (3, 3)


def test_modifiers_and_storage_kinds():
    code = dedent("""\
        public struct Service {
          static let shared = Service()
          public let id: Int
          private var secret: String
          fileprivate var token = "abc"
          public private(set) var name: String
          lazy var cache = 0
          var computed: String { "value" }
        }
        """)
    decl = declarations(code)[0]
    m = members_by_name(decl)

    assert decl.visibility == "public"
    assert m["shared"].is_static
    assert m["shared"].initializer == "Service()"
    assert m["id"].storage == "immutable"
    assert m["id"].visibility == "public"
    assert m["secret"].visibility == "private"
    assert m["token"].visibility == "fileprivate"
    assert m["token"].initializer == '"abc"'
    assert m["name"].visibility == "public"
    assert m["name"].setter_visibility == "private"
    assert m["cache"].initializer == "0"
    assert m["computed"].storage == "computed"
    assert m["computed"].type_annotation == "String"
    assert m["computed"].accessors == ("get",)


def test_accessor_blocks_and_observers():
    code = dedent("""\
        struct Box {
          var value: Int {
            get { storage }
            set { storage = newValue }
          }
          var readOnly: Int {
            get { 1 }
          }
          var count: Int = 0 {
            didSet { print(count) }
          }
          var storage: Int
        }
        """)
    m = members_by_name(declarations(code)[0])

    assert m["value"].storage == "computed"
    assert m["value"].accessors == ("get", "set")
    assert m["readOnly"].accessors == ("get",)
    assert m["count"].storage == "mutable"
    assert m["count"].accessors == ("didSet",)
    assert m["count"].initializer == "0"
    assert m["storage"].accessors == ()


def test_multiple_bindings():
    code = dedent("""\
        struct Point {
          var x, y: Double
          var a = 1, b = "two"
        }
        """)
    decl = declarations(code)[0]
    m = members_by_name(decl)

    assert [mem.name for mem in decl.members] == ["x", "y", "a", "b"]
    assert m["x"].type_annotation == "Double"
    assert m["y"].type_annotation == "Double"
    assert m["a"].initializer == "1"
    assert m["b"].initializer == '"two"'


def test_property_wrapper_with_nested_arguments_keeps_member():
    code = dedent("""\
        struct Settings {
          @Clamped(range: (0...10)) var level: Int = 5
          var name: String
        }
        """)
    decl = declarations(code)[0]

    assert [m.name for m in decl.members] == ["level", "name"]
    level = decl.members[0]
    assert level.type_annotation == "Int"
    assert level.initializer == "5"
    assert level.visibility == "internal"
    assert not level.is_static


def test_backticked_names_kept_verbatim():
    code = "struct Keywords {\n  var `default`: Int\n}\n"
    (member,) = declarations(code)[0].members
    assert member.name == "`default`"
    assert member.type_annotation == "Int"


def test_comments_strings_and_nested_types_ignored():
    code = dedent("""\
        struct Outer {
          // var hidden: Int
          /* var nope: Int
             /* nested */ */
          var brace = "{ not a block }"
          struct Inner {
            var x: Int
          }
          func reset() {
            var temp = 1
          }
          var y: Int
        }
        """)
    decls = declarations(code)

    assert [d.name for d in decls] == ["Outer"]
    outer = decls[0]
    assert [m.name for m in outer.members] == ["brace", "y"]
    assert outer.members[0].initializer == '"{ not a block }"'


def test_closure_types_and_multiline_initializer():
    code = dedent("""\
        struct Client {
          var handler: @Sendable (String) -> Void
          var load: (_ id: Int) async throws -> Data
          static let live = Client(
            handler: { _ in },
            load: { _ in Data() }
          )
        }
        """)
    decl = declarations(code)[0]
    m = members_by_name(decl)

    assert [mem.name for mem in decl.members] == ["handler", "load", "live"]
    assert m["handler"].type_annotation == "@Sendable (String) -> Void"
    assert m["load"].type_annotation == "(_ id: Int) async throws -> Data"
    assert m["live"].is_static
    assert m["live"].initializer.startswith("Client(")


def test_declaration_kinds():
    code = dedent("""\
        final class Session {
          var token: String = ""
        }

        enum Mode {
          case fast
        }

        actor Store {
          var items: [String] = []
        }

        extension Session {}

        protocol Named {
          var name: String { get }
        }
        """)
    decls = declarations(code)
    kinds = [(d.name, d.keyword, d.kind) for d in decls]

    assert kinds == [
        ("Session", "class", "reference-type"),
        ("Mode", "enum", "sum-type"),
        ("Store", "actor", "isolation-unit"),
        ("Session", "extension", "other"),
        ("Named", "protocol", "other"),
    ]
    assert decls[1].location.line == 5


def test_mirrored_units_filter_on_attribute():
    code = dedent("""\
        @ProtocolMirror
        public struct A {
          var x: Int
        }

        struct B {
          var y: Int
        }

        @MainActor @ProtocolMirror
        struct C {
          var z: Int
        }
        """)
    units = adapter.parse_units(code)
    assert [u.declaration.name for u in adapter.mirrored_units(units)] == ["A", "C"]
    assert units[2].declaration.attributes == ("MainActor", "ProtocolMirror")


def test_find_unit_prefers_type_over_extension():
    code = dedent("""\
        extension Foo {
          var extra: Int { 1 }
        }

        struct Foo {
          var value: Int
        }
        """)
    units = adapter.parse_units(code)

    unit = adapter.find_unit(units, "Foo")
    assert unit.declaration.keyword == "struct"
    assert unit.declaration.members[0].name == "value"
    assert adapter.find_unit(units, "Missing") is None


def test_attribute_spans_point_at_source():
    code = "@ProtocolMirror\nstruct A {\n  var x: Int\n}\n"
    unit = adapter.parse_units(code)[0]

    assert unit.start == 0
    assert code[unit.end - 1] == "}"
    (name, start, end), = unit.attribute_spans
    assert name == "ProtocolMirror"
    assert code[start:end] == "@ProtocolMirror"


def test_offsets_are_characters_not_bytes():
    code = '// café\n@ProtocolMirror\nstruct A {\n  var s = "naïve"\n}\n'
    unit = adapter.parse_units(code)[0]

    name, start, end = unit.attribute_spans[0]
    assert code[start:end] == "@ProtocolMirror"
    assert code[unit.end - 1] == "}"
    assert unit.declaration.members[0].initializer == '"naïve"'


def test_malformed_source_raises_value_error():
    with pytest.raises(ValueError):
        adapter.parse_units("struct A {\n  var x: Int\n")
    with pytest.raises(ValueError):
        adapter.parse_units('struct A {\n  var s = "unterminated\n}\n')
    with pytest.raises(ValueError):
        adapter.parse_units("struct A {\n  var x: Int\n}}\n")
