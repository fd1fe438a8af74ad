from __future__ import annotations

import logging
from typing import Optional

import config
from decl.model import Diagnostic, InputDeclaration

logger = logging.getLogger(__name__)

# closed set of declaration kinds; anything unknown falls through to "other"
_KIND_NOUNS = {
    "sum-type": "enum",
    "reference-type": "class",
    "isolation-unit": "actor",
}


def describe_kind(decl: InputDeclaration) -> str:
    kind = decl.kind
    if kind == "record":
        return "struct"
    if kind in _KIND_NOUNS:
        noun = decl.keyword or _KIND_NOUNS[kind]
        return f"{noun} ({kind})"
    noun = decl.keyword or "declaration"
    return f"{noun} (other)"


def check_declaration(decl: InputDeclaration) -> Optional[Diagnostic]:
    """
    Precondition gate: None for a record, otherwise the single error that
    makes the caller discard this invocation.
    """
    if decl.kind == "record":
        return None

    message = (
        f"'@{config.MIRROR_ATTRIBUTE}' can only be applied to struct types, "
        f"but was applied to {describe_kind(decl)}. Protocol mirroring requires a struct."
    )
    diagnostic = Diagnostic(
        message=message,
        location=decl.location,
        severity="error",
        domain=config.MIRROR_ATTRIBUTE,
        id=f"unsupported-{decl.kind}",
    )
    logger.warning("%s: %s", decl.location, message)
    return diagnostic
