import os
import sys
from textwrap import dedent

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from adapters.swift_adapter import SwiftAdapter
from decl.model import InputDeclaration, MethodRequirement, RawMember
from mirror.emitter import declare_conformance
from mirror.pipeline import mirror_declaration
from protocol_rules import (
    render_conformance,
    render_expansion,
    render_interface,
    render_method,
)


def mirror_source(code, conformance=False):
    adapter = SwiftAdapter()
    units = adapter.mirrored_units(adapter.parse_units(code))
    results = {u.declaration.name: mirror_declaration(u.declaration) for u in units}
    return render_expansion(code, units, results, conformance=conformance)


def test_render_internal_interface():
    decl = InputDeclaration(name="APIClient", members=(
        RawMember("fetchUser", type_annotation="(Int) async throws -> User", storage="immutable"),
        RawMember("config", type_annotation="Config"),
    ))
    text = render_interface(mirror_declaration(decl).interface)

    assert text == (
        "extension APIClient {\n"
        "    protocol `Protocol` {\n"
        "        var fetchUser: (Int) async throws -> User { get }\n"
        "        var config: Config { get set }\n"
        "    }\n"
        "}"
    )


def test_render_public_interface_with_custom_indent():
    decl = InputDeclaration(name="PublicClient", visibility="public", members=(
        RawMember("endpoint", type_annotation="String"),
    ))
    text = render_interface(mirror_declaration(decl).interface, indent=2)

    assert text == (
        "public extension PublicClient {\n"
        "  public protocol `Protocol` {\n"
        "    var endpoint: String { get set }\n"
        "  }\n"
        "}"
    )


def test_render_method_effects():
    assert render_method(MethodRequirement(
        name="fetch",
        parameters=(("id", "Int"), ("includeDetails", "Bool")),
        return_type="User",
        is_async=True,
        is_throwing=True,
    )) == "func fetch(id: Int, includeDetails: Bool) async throws -> User"

    assert render_method(MethodRequirement(
        name="load",
        parameters=(("path", "String"),),
        return_type="Data",
        is_throwing=True,
        thrown_type="LoadError",
    )) == "func load(path: String) throws(LoadError) -> Data"

    assert render_method(MethodRequirement(name="ping", parameters=(), return_type="Void")) == "func ping() -> Void"


def test_render_conformance():
    decl = InputDeclaration(name="APIClient", members=(RawMember("config", type_annotation="Config"),))
    conformance = declare_conformance(mirror_declaration(decl).interface)
    assert render_conformance(conformance) == "extension APIClient: APIClient.`Protocol` {}"


def test_expansion_places_interface_after_record():
    code = dedent("""\
        @ProtocolMirror
        struct APIClient {
          var config: Config
        }
        """)
    assert mirror_source(code) == (
        "struct APIClient {\n"
        "  var config: Config\n"
        "}\n"
        "\n"
        "extension APIClient {\n"
        "    protocol `Protocol` {\n"
        "        var config: Config { get set }\n"
        "    }\n"
        "}\n"
    )


def test_expansion_with_labeled_closure_and_conformance():
    code = dedent("""\
        @ProtocolMirror public struct Loader {
          public var fetch: (_ id: Int) async throws -> Data
        }
        """)
    expanded = mirror_source(code, conformance=True)

    assert expanded.startswith("public struct Loader {")
    assert "var fetch: (_ id: Int) async throws -> Data { get }" in expanded
    assert "func fetch(id: Int) async throws -> Data" in expanded
    assert expanded.rstrip().endswith("extension Loader: Loader.`Protocol` {}")


def test_expansion_leaves_other_declarations_alone():
    code = dedent("""\
        struct Plain {
          var x: Int
        }

        @ProtocolMirror
        struct Empty {
          private var hidden: Int
        }
        """)
    expanded = mirror_source(code)

    assert "extension" not in expanded
    assert "@ProtocolMirror" not in expanded
    assert expanded.startswith("struct Plain {")


def test_expansion_keeps_other_attributes():
    code = dedent("""\
        @MainActor @ProtocolMirror
        struct Client {
          var x: Int
        }
        """)
    expanded = mirror_source(code)

    assert expanded.startswith("@MainActor\nstruct Client {")
    assert "protocol `Protocol` {" in expanded


def test_backticked_member_survives_expansion():
    code = "@ProtocolMirror\nstruct Keywords {\n  var `default`: Int\n}\n"
    expanded = mirror_source(code)
    assert "        var `default`: Int { get set }\n" in expanded


def test_keyword_member_names_are_escaped():
    decl = InputDeclaration(name="Options", members=(
        RawMember("default", type_annotation="Int"),
        RawMember("`in`", type_annotation="(_ value: Int) -> Void"),
        RawMember("count", type_annotation="Int"),
    ))
    lines = render_interface(mirror_declaration(decl).interface).splitlines()

    assert lines[2].strip() == "var `default`: Int { get set }"
    assert lines[3].strip() == "var `in`: (_ value: Int) -> Void { get }"
    assert lines[4].strip() == "func `in`(value: Int) -> Void"
    assert lines[5].strip() == "var count: Int { get set }"
