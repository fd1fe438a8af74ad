"""
Type resolution for mirrored members.

An explicit annotation always wins and is used verbatim. Without one, the
initializer's literal shape is matched against a small ordered table. The
table is a heuristic for unannotated literal fields, not type inference:
negative numbers, collections, calls and closures are deliberately absent,
and members they initialise are dropped from the interface.
"""
from __future__ import annotations

import logging
import re
from typing import Optional, Pattern, Tuple

from decl.model import RawMember, ResolvedType
from mirror.type_syntax import parse_function_type

logger = logging.getLogger(__name__)

_DIGITS = r"[0-9][0-9_]*"
_HEX = r"[0-9a-fA-F][0-9a-fA-F_]*"

# evaluated in order; first match wins
LITERAL_TYPE_RULES: Tuple[Tuple[str, Pattern[str], str], ...] = (
    ("boolean", re.compile(r"^(?:true|false)$"), "Bool"),
    (
        "float",
        re.compile(
            rf"^(?:{_DIGITS}\.{_DIGITS}(?:[eE][+-]?{_DIGITS})?"
            rf"|{_DIGITS}[eE][+-]?{_DIGITS}"
            rf"|0x{_HEX}(?:\.{_HEX})?[pP][+-]?{_DIGITS})$"
        ),
        "Double",
    ),
    (
        "integer",
        re.compile(rf"^(?:0x{_HEX}|0o[0-7][0-7_]*|0b[01][01_]*|{_DIGITS})$"),
        "Int",
    ),
    (
        "string",
        re.compile(r'^(?P<hashes>#*)(?:"""[\s\S]*"""|"(?:[^"\\\n]|\\.)*")(?P=hashes)$'),
        "String",
    ),
)


def literal_type(expression: Optional[str]) -> Optional[str]:
    if expression is None:
        return None
    text = expression.strip()
    for _shape, pattern, type_name in LITERAL_TYPE_RULES:
        if pattern.match(text):
            return type_name
    return None


def resolve_type(member: RawMember) -> Optional[ResolvedType]:
    """
    Annotation verbatim, else literal initializer, else None (the caller
    drops the member without a diagnostic).
    """
    if member.type_annotation and member.type_annotation.strip():
        text = member.type_annotation.strip()
    else:
        inferred = literal_type(member.initializer)
        if inferred is None:
            logger.debug("cannot resolve type of %r (initializer=%r)", member.name, member.initializer)
            return None
        text = inferred
    return ResolvedType(text=text, function=parse_function_type(text))
