"""
The mirror pass: record declaration in, nested interface out.

    result = mirror_declaration(decl)
    if result.interface:
        conformance = declare_conformance(result.interface)

Each call is pure with respect to its input; nothing is registered or cached
between calls.
"""
from __future__ import annotations

import logging
from typing import Iterable, List

from decl.model import InputDeclaration, MirrorResult, PropertyRequirement, Requirement
from mirror.diagnostics import check_declaration
from mirror.emitter import emit_interface
from mirror.mutability import classify_access
from mirror.resolver import resolve_type
from mirror.scanner import eligible_members
from mirror.synonyms import derive_method

logger = logging.getLogger(__name__)


def collect_requirements(decl: InputDeclaration) -> List[Requirement]:
    requirements: List[Requirement] = []
    for member in eligible_members(decl):
        resolved = resolve_type(member)
        if resolved is None:
            continue

        requirements.append(
            PropertyRequirement(
                name=member.name,
                type=resolved,
                access=classify_access(member, resolved),
                source=member.name,
            )
        )

        method = derive_method(member, resolved)
        if method is not None:
            requirements.append(method)
    return requirements


def mirror_declaration(decl: InputDeclaration) -> MirrorResult:
    diagnostic = check_declaration(decl)
    if diagnostic is not None:
        return MirrorResult(declaration=decl, interface=None, diagnostics=(diagnostic,))

    interface = emit_interface(decl, collect_requirements(decl))
    if interface is None:
        logger.debug("%s: no eligible members, no interface emitted", decl.name)
    else:
        logger.debug("%s: emitted %s with %d requirement(s)", decl.name, interface.qualified_name, len(interface.requirements))
    return MirrorResult(declaration=decl, interface=interface, diagnostics=())


def mirror_all(decls: Iterable[InputDeclaration]) -> List[MirrorResult]:
    return [mirror_declaration(d) for d in decls]
