"""
adapters/swift_adapter.py

Swift source → declaration model, built on the tree-sitter Swift grammar.

Reads the part of Swift the mirror pass needs: top-level type declarations
and the `let` / `var` members of their bodies.

Features:
  - struct / class / enum / actor / protocol / extension declarations with
    attributes, modifiers and source location
  - Modifiers: visibility, private(set)-style setter visibility,
    static / class
  - One RawMember per binding (`var a = 1, b = 2`, `var x, y: Int`)
  - Accessor blocks: implicit getter, explicit get/set, observers
  - Identifiers kept verbatim, backticks included
  - Nested types and function bodies are not read
  - Syntax errors raise ValueError
"""

from __future__ import annotations

import bisect
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import tree_sitter_swift  # type: ignore
from tree_sitter import Language, Node, Parser  # type: ignore

import config
from decl.model import InputDeclaration, RawMember, SourceLocation

logger = logging.getLogger(__name__)

SWIFT_LANGUAGE = Language(tree_sitter_swift.language())

_KIND_BY_KEYWORD: Dict[str, str] = {
    "struct": "record",
    "enum": "sum-type",
    "class": "reference-type",
    "actor": "isolation-unit",
    "protocol": "other",
    "extension": "other",
}

_TYPE_NODES = ("class_declaration", "protocol_declaration")

_VISIBILITY_WORDS = ("public", "package", "internal", "fileprivate", "private")

_COMMENT_NODES = ("comment", "multiline_comment")

# children of a property_declaration that are not a binding's initializer
_NON_VALUE_NODES = (
    "modifiers",
    "attribute",
    "value_binding_pattern",
    "pattern",
    "type_annotation",
    "type_constraints",
    "computed_property",
    "willset_didset_block",
) + _COMMENT_NODES

_ACCESSOR_NODES = {
    "computed_getter": "get",
    "computed_setter": "set",
    "computed_modify": "_modify",
}

_OBSERVER_NODES = {
    "willset_clause": "willSet",
    "didset_clause": "didSet",
}


@dataclass
class SwiftUnit:
    """A parsed top-level declaration plus where it sits in the source."""
    declaration: InputDeclaration
    start: int
    end: int                                         # one past the closing brace
    attribute_spans: Tuple[Tuple[str, int, int], ...] = ()


class _Source:
    """Source text with byte → character offset and line/column lookups."""

    def __init__(self, code: str, filename: Optional[str]) -> None:
        self.code = code
        self.data = code.encode("utf-8")
        self.filename = filename
        self.ascii = len(self.data) == len(code)
        self.line_starts = [0]
        for i, ch in enumerate(code):
            if ch == "\n":
                self.line_starts.append(i + 1)

    def offset(self, byte_offset: int) -> int:
        if self.ascii:
            return byte_offset
        return len(self.data[:byte_offset].decode("utf-8", errors="ignore"))

    def text(self, node: Node) -> str:
        return self.data[node.start_byte:node.end_byte].decode("utf-8")

    def between(self, start_byte: int, end_byte: int) -> str:
        return self.data[start_byte:end_byte].decode("utf-8")

    def location(self, node: Node) -> SourceLocation:
        offset = self.offset(node.start_byte)
        idx = bisect.bisect_right(self.line_starts, offset) - 1
        return SourceLocation(line=idx + 1, column=offset - self.line_starts[idx] + 1, file=self.filename)


class SwiftAdapter:
    """
    Swift → InputDeclaration builder.

    parse_units() keeps source offsets (used for macro-style expansion),
    mirrored_units() keeps the ones carrying the mirror attribute and
    find_unit() picks a type by name.
    """

    language = "swift"

    def __init__(self) -> None:
        self.parser = Parser(SWIFT_LANGUAGE)

    # ---------------- Syntax errors ----------------

    def _first_error(self, node: Node) -> Optional[Node]:
        if node.type == "ERROR" or node.is_missing:
            return node
        if not node.has_error:
            return None
        for child in node.children:
            found = self._first_error(child)
            if found is not None:
                return found
        return node

    def parse_to_ast(self, code: str):
        try:
            tree = self.parser.parse(code.encode("utf-8"))
        except Exception as e:
            raise ValueError(f"Failed to parse Swift code: {e}")

        root = tree.root_node
        if root.has_error:
            bad = self._first_error(root) or root
            line = bad.start_point[0] + 1
            if bad.is_missing:
                raise ValueError(f"Swift syntax error: missing '{bad.type}' on line {line}")
            raise ValueError(f"Swift syntax error: unexpected input on line {line}")
        return tree

    # ---------------- Modifiers ----------------

    def _attribute_name(self, src: _Source, node: Node) -> str:
        for child in node.named_children:
            if child.type == "user_type":
                return src.text(child)
        return src.text(node).lstrip("@").split("(")[0].strip()

    def _modifier_nodes(self, node: Node) -> List[Node]:
        found: List[Node] = []
        for child in node.children:
            if child.type == "modifiers":
                found.extend(c for c in child.named_children if c.type not in _COMMENT_NODES)
            elif child.type == "attribute":
                found.append(child)
        return found

    def _modifier_words(self, src: _Source, mods: Sequence[Node]) -> List[str]:
        return ["".join(src.text(m).split()) for m in mods if m.type != "attribute"]

    def _visibility_from_mods(self, words: List[str]) -> str:
        for word in words:
            if word == "open":
                return "public"
            if word in _VISIBILITY_WORDS:
                return word
        return "internal"

    def _setter_visibility_from_mods(self, words: List[str]) -> Optional[str]:
        for word in words:
            if word.endswith("(set)") and word[:-5] in _VISIBILITY_WORDS:
                return word[:-5]
        return None

    # ---------------- Members ----------------

    def _binding_name(self, src: _Source, pattern: Node) -> Optional[str]:
        if pattern.type == "simple_identifier":
            return src.text(pattern)
        named = [c for c in pattern.named_children if c.type not in _COMMENT_NODES]
        if len(named) == 1 and named[0].type == "simple_identifier":
            return src.text(named[0])
        return None  # tuple pattern

    def _annotation_text(self, src: _Source, node: Node) -> Optional[str]:
        start = None
        for child in node.children:
            if child.type == ":":
                start = child.end_byte
                break
        if start is None:
            named = node.named_children
            if not named:
                return None
            start = named[0].start_byte
        return src.between(start, node.end_byte).strip() or None

    def _accessors(self, node: Node, table: Dict[str, str]) -> Tuple[str, ...]:
        found: List[str] = []
        for child in node.named_children:
            word = table.get(child.type)
            if word and word not in found:
                found.append(word)
        return tuple(found)

    def _parse_property(self, src: _Source, node: Node) -> List[RawMember]:
        mods = self._modifier_nodes(node)
        words = self._modifier_words(src, mods)
        visibility = self._visibility_from_mods(words)
        setter_visibility = self._setter_visibility_from_mods(words)
        is_static = "static" in words or "class" in words
        location = src.location(node)

        binding = "var"
        bindings: List[Dict[str, object]] = []
        current: Optional[Dict[str, object]] = None
        for child in node.children:
            kind = child.type
            if kind == "value_binding_pattern" or kind in ("let", "var"):
                binding = src.text(child).split()[-1]
            elif kind == "pattern" or (kind == "simple_identifier" and current is None):
                current = {
                    "name": self._binding_name(src, child),
                    "type_annotation": None,
                    "initializer": None,
                    "accessors": (),
                    "computed": False,
                }
                bindings.append(current)
            elif current is None:
                continue
            elif kind == "type_annotation":
                current["type_annotation"] = self._annotation_text(src, child)
            elif kind == "computed_property":
                current["accessors"] = self._accessors(child, _ACCESSOR_NODES) or ("get",)
                current["computed"] = True
            elif kind == "willset_didset_block":
                current["accessors"] = self._accessors(child, _OBSERVER_NODES)
            elif child.is_named and kind not in _NON_VALUE_NODES:
                current["initializer"] = src.text(child).strip() or None

        # `var x, y: Int`: an untyped, uninitialised binding takes the next annotation
        carried: Optional[str] = None
        for info in reversed(bindings):
            if info["type_annotation"]:
                carried = info["type_annotation"]  # type: ignore[assignment]
            elif not info["initializer"] and not info["accessors"]:
                info["type_annotation"] = carried

        members: List[RawMember] = []
        for info in bindings:
            if info["name"] is None:
                logger.debug("line %d: skipping non-identifier binding", location.line)
                continue
            if binding == "let":
                storage = "immutable"
            elif info["computed"]:
                storage = "computed"
            else:
                storage = "mutable"
            members.append(
                RawMember(
                    name=info["name"],  # type: ignore[arg-type]
                    type_annotation=info["type_annotation"],  # type: ignore[arg-type]
                    initializer=info["initializer"],  # type: ignore[arg-type]
                    storage=storage,  # type: ignore[arg-type]
                    accessors=info["accessors"],  # type: ignore[arg-type]
                    visibility=visibility,  # type: ignore[arg-type]
                    setter_visibility=setter_visibility,  # type: ignore[arg-type]
                    is_static=is_static,
                    location=location,
                )
            )
        return members

    # ---------------- Declarations ----------------

    def _keyword(self, node: Node) -> str:
        if node.type == "protocol_declaration":
            return "protocol"
        kind = node.child_by_field_name("declaration_kind")
        return kind.type if kind is not None else "other"

    def _unit(self, src: _Source, node: Node) -> SwiftUnit:
        keyword = self._keyword(node)
        name_node = node.child_by_field_name("name")
        name = src.text(name_node) if name_node is not None else ""

        mods = self._modifier_nodes(node)
        attribute_spans = tuple(
            (self._attribute_name(src, m), src.offset(m.start_byte), src.offset(m.end_byte))
            for m in mods
            if m.type == "attribute"
        )

        members: List[RawMember] = []
        body = node.child_by_field_name("body")
        if body is not None:
            for child in body.named_children:
                if child.type == "property_declaration":
                    members.extend(self._parse_property(src, child))

        decl = InputDeclaration(
            name=name,
            kind=_KIND_BY_KEYWORD.get(keyword, "other"),  # type: ignore[arg-type]
            visibility=self._visibility_from_mods(self._modifier_words(src, mods)),  # type: ignore[arg-type]
            members=tuple(members),
            keyword=keyword,
            attributes=tuple(s[0] for s in attribute_spans),
            location=src.location(node),
        )
        logger.debug("parsed %s %s with %d member(s)", keyword, name, len(members))
        return SwiftUnit(
            declaration=decl,
            start=src.offset(node.start_byte),
            end=src.offset(node.end_byte),
            attribute_spans=attribute_spans,
        )

    # ---------------- Parsing entry points ----------------

    def parse_units(self, code: str, filename: Optional[str] = None) -> List[SwiftUnit]:
        tree = self.parse_to_ast(code)
        src = _Source(code, filename)
        return [self._unit(src, node) for node in tree.root_node.named_children if node.type in _TYPE_NODES]

    def mirrored_units(self, units: Sequence[SwiftUnit], attribute: Optional[str] = None) -> List[SwiftUnit]:
        attribute = attribute or config.MIRROR_ATTRIBUTE
        return [u for u in units if attribute in u.declaration.attributes]

    def find_unit(self, units: Sequence[SwiftUnit], name: str) -> Optional[SwiftUnit]:
        """The type called `name`; extensions of it are not the type itself."""
        for unit in units:
            if unit.declaration.name == name and unit.declaration.keyword != "extension":
                return unit
        return None
