"""
Method synonyms for closure-valued members.

A stored closure such as

    var fetch: (_ id: Int, _ includeDetails: Bool) async throws -> User

can only be called positionally (``client.fetch(1, true)``). When at least
one of its parameters carries an external label, the interface also gets a
method requirement that restores named-argument call syntax:

    func fetch(id: Int, includeDetails: Bool) async throws -> User

Parameters without a label are left out of that signature.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from decl.model import FunctionType, MethodRequirement, RawMember, ResolvedType

logger = logging.getLogger(__name__)


def labeled_parameters(function: FunctionType) -> List[Tuple[str, str]]:
    pairs: List[Tuple[str, str]] = []
    for param in function.parameters:
        label = param.label
        if label is None:
            continue
        pairs.append((label, param.type_text))
    return pairs


def has_labels(function: FunctionType) -> bool:
    return any(p.label is not None for p in function.parameters)


def derive_method(member: RawMember, resolved: ResolvedType) -> Optional[MethodRequirement]:
    function = resolved.function
    if function is None or not has_labels(function):
        return None

    params = labeled_parameters(function)
    dropped = len(function.parameters) - len(params)
    if dropped:
        logger.debug("%s: omitting %d unlabeled parameter(s) from derived method", member.name, dropped)

    return MethodRequirement(
        name=member.name,
        parameters=tuple(params),
        return_type=function.return_type,
        is_async=function.is_async,
        is_throwing=function.is_throwing,
        thrown_type=function.thrown_type,
        source=member.name,
    )
