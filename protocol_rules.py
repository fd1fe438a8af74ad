from __future__ import annotations

from typing import Dict, List, Optional, Sequence

import config
from adapters.swift_adapter import SwiftUnit
from decl.model import (
    ConformanceDeclaration,
    InterfaceSpec,
    MethodRequirement,
    MirrorResult,
    PropertyRequirement,
)
from mirror.emitter import declare_conformance


# Visibility keyword written in front of generated declarations; internal is implicit
ACCESS_KEYWORDS = {
    "public": "public ",
    "package": "package ",
    "internal": "",
    "fileprivate": "fileprivate ",
    "private": "private ",
}

ACCESSOR_CLAUSES = {
    "read-only": "{ get }",
    "read-write": "{ get set }",
}


# words that need backticks when declared as a property or method name
SWIFT_KEYWORDS = frozenset({
    "associatedtype", "class", "deinit", "enum", "extension", "fileprivate",
    "func", "import", "init", "inout", "internal", "let", "open", "operator",
    "private", "precedencegroup", "protocol", "public", "rethrows", "static",
    "struct", "subscript", "typealias", "var", "break", "case", "catch",
    "continue", "default", "defer", "do", "else", "fallthrough", "for",
    "guard", "if", "in", "repeat", "return", "throw", "switch", "where",
    "while", "as", "false", "is", "nil", "self", "Self", "super", "throws",
    "true", "try", "Any",
})


def _member_name(name: str) -> str:
    if name.startswith("`") or name not in SWIFT_KEYWORDS:
        return name
    return f"`{name}`"


def _access_prefix(visibility: str) -> str:
    return ACCESS_KEYWORDS.get(visibility, "")


def _escape_name(name: str) -> str:
    """`Protocol`, `Type` and friends are reserved and must be backticked."""
    if name in ("Protocol", "Type", "Self", "self", "Any") or not name.isidentifier():
        return f"`{name}`"
    return name


def _effects(is_async: bool, is_throwing: bool, thrown_type: Optional[str]) -> str:
    out: List[str] = []
    if is_async:
        out.append("async")
    if is_throwing:
        out.append(f"throws({thrown_type})" if thrown_type else "throws")
    return (" " + " ".join(out)) if out else ""


# ======================================================================
#  REQUIREMENTS
# ======================================================================

def render_property(req: PropertyRequirement) -> str:
    return f"var {_member_name(req.name)}: {req.type.text} {ACCESSOR_CLAUSES[req.access]}"


def render_method(req: MethodRequirement) -> str:
    params = ", ".join(f"{label}: {type_text}" for label, type_text in req.parameters)
    effects = _effects(req.is_async, req.is_throwing, req.thrown_type)
    return f"func {_member_name(req.name)}({params}){effects} -> {req.return_type}"


def render_requirement(req) -> str:
    if isinstance(req, MethodRequirement):
        return render_method(req)
    return render_property(req)


# ======================================================================
#  INTERFACE / CONFORMANCE
# ======================================================================

def render_interface(interface: InterfaceSpec, indent: Optional[int] = None) -> str:
    """
    InterfaceSpec -> Swift source:

        public extension Client {
            public protocol `Protocol` {
                var endpoint: String { get set }
            }
        }
    """
    pad = " " * (config.INDENT_WIDTH if indent is None else indent)
    access = _access_prefix(interface.visibility)

    lines: List[str] = []
    lines.append(f"{access}extension {interface.owner} {{")
    lines.append(f"{pad}{access}protocol {_escape_name(interface.name)} {{")
    for req in interface.requirements:
        lines.append(f"{pad}{pad}{render_requirement(req)}")
    lines.append(f"{pad}}}")
    lines.append("}")
    return "\n".join(lines)


def render_conformance(conformance: ConformanceDeclaration) -> str:
    # conformance extensions cannot carry an access modifier
    return f"extension {conformance.type_name}: {conformance.type_name}.{_escape_name(conformance.interface_name)} {{}}"


# ======================================================================
#  EXPANDED SOURCE
# ======================================================================

def _remove_attribute(code: str, start: int, end: int) -> str:
    """Drop one attribute; drop its whole line when nothing else is on it."""
    line_start = code.rfind("\n", 0, start) + 1
    line_end = code.find("\n", end)
    line_end = len(code) if line_end == -1 else line_end
    if not code[line_start:start].strip() and not code[end:line_end].strip():
        return code[:line_start] + code[line_end + 1:]
    if not code[end:line_end].strip():
        while start > line_start and code[start - 1] in " \t":
            start -= 1
        return code[:start] + code[end:]
    while end < len(code) and code[end] in " \t":
        end += 1
    return code[:start] + code[end:]


def render_expansion(
    code: str,
    units: Sequence[SwiftUnit],
    results: Dict[str, MirrorResult],
    conformance: bool = False,
    attribute: Optional[str] = None,
) -> str:
    """
    Macro-style expanded source: the mirror attribute is removed from each
    mirrored declaration and the generated extension is placed right after
    it. `results` is keyed by declaration name.
    """
    attribute = attribute or config.MIRROR_ATTRIBUTE
    expanded = code

    # back to front so earlier offsets stay valid
    for unit in sorted(units, key=lambda u: u.start, reverse=True):
        result = results.get(unit.declaration.name)
        if result is None:
            continue

        addition = ""
        if result.interface is not None:
            addition = "\n\n" + render_interface(result.interface)
            if conformance:
                addition += "\n\n" + render_conformance(declare_conformance(result.interface))
        expanded = expanded[:unit.end] + addition + expanded[unit.end:]

        for name, a_start, a_end in sorted(unit.attribute_spans, key=lambda s: s[1], reverse=True):
            if name == attribute:
                expanded = _remove_attribute(expanded, a_start, a_end)

    return expanded
