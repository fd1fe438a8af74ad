"""
Small helpers for reading Swift type text.

Only what the mirror pass needs: bracket-aware splitting and recognising
function types such as ``(_ id: Int) async throws -> User``. This is not a
type checker; anything it does not recognise is treated as an opaque type.
"""
from __future__ import annotations

import re
from typing import List, Optional

from decl.model import FunctionParameter, FunctionType

_OPENERS = "([{<"
_CLOSERS = ")]}>"

# leading type attributes (@Sendable, @escaping, @MainActor, @convention(c))
_TYPE_ATTRIBUTE_RE = re.compile(r"@\w+(?:\([^()]*\))?\s*")

_EFFECTS_RE = re.compile(
    r"^(?P<async>async\b\s*)?"
    r"(?P<throws>(?:throws|rethrows)\b\s*(?:\((?P<thrown>[^()]*)\)\s*)?)?"
    r"->\s*(?P<ret>.+)$",
    re.DOTALL,
)


def _is_arrow_tip(text: str, i: int) -> bool:
    return text[i] == ">" and i > 0 and text[i - 1] == "-"


def top_level_indexes(text: str, target: str, angles: bool = True) -> List[int]:
    """Indexes of `target` that sit outside every bracket pair."""
    depth = 0
    found: List[int] = []
    for i, ch in enumerate(text):
        if ch == target and depth == 0:
            found.append(i)
            continue
        if not angles and ch in "<>":
            continue
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            if _is_arrow_tip(text, i):
                continue
            depth = max(depth - 1, 0)
    return found


def split_top_level(text: str, sep: str = ",", angles: bool = True) -> List[str]:
    parts: List[str] = []
    start = 0
    for idx in top_level_indexes(text, sep, angles=angles):
        parts.append(text[start:idx])
        start = idx + 1
    parts.append(text[start:])
    return parts


def find_matching(text: str, open_index: int) -> Optional[int]:
    """Index of the bracket closing the one at `open_index` (angles ignored)."""
    pairs = {"(": ")", "[": "]", "{": "}"}
    opener = text[open_index]
    if opener not in pairs:
        return None
    stack = [pairs[opener]]
    for i in range(open_index + 1, len(text)):
        ch = text[i]
        if ch in pairs:
            stack.append(pairs[ch])
        elif ch in ")]}":
            if ch != stack[-1]:
                return None
            stack.pop()
            if not stack:
                return i
    return None


def strip_type_attributes(text: str) -> str:
    t = text.strip()
    while t.startswith("@"):
        m = _TYPE_ATTRIBUTE_RE.match(t)
        if not m:
            break
        t = t[m.end():]
    return t


def parse_parameter(piece: str) -> FunctionParameter:
    colons = top_level_indexes(piece, ":")
    if colons:
        names = piece[: colons[0]].split()
        type_text = piece[colons[0] + 1:].strip()
        if len(names) == 1:
            return FunctionParameter(type_text=type_text, first_name=names[0])
        if len(names) == 2:
            return FunctionParameter(type_text=type_text, first_name=names[0], second_name=names[1])
    return FunctionParameter(type_text=piece.strip())


def parse_function_type(text: Optional[str]) -> Optional[FunctionType]:
    """
    Parse `(params) [async] [throws[(E)]] -> R`. Returns None for anything
    else, including optional closures like `((Int) -> Void)?` and tuples.
    """
    if not text:
        return None
    t = strip_type_attributes(text)
    if not t.startswith("("):
        return None
    close = find_matching(t, 0)
    if close is None:
        return None

    m = _EFFECTS_RE.match(t[close + 1:].strip())
    if not m:
        return None

    params: List[FunctionParameter] = []
    inner = t[1:close]
    if inner.strip():
        for piece in split_top_level(inner, ","):
            if piece.strip():
                params.append(parse_parameter(piece))

    thrown = m.group("thrown")
    return FunctionType(
        parameters=tuple(params),
        return_type=m.group("ret").strip(),
        is_async=bool(m.group("async")),
        is_throwing=bool(m.group("throws")),
        thrown_type=thrown.strip() if thrown and thrown.strip() else None,
    )
