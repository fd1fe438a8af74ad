from __future__ import annotations

import logging
from typing import Iterator, List, Tuple

from decl.model import InputDeclaration, RawMember, RESTRICTED_VISIBILITIES

logger = logging.getLogger(__name__)


def scan_members(decl: InputDeclaration) -> Iterator[Tuple[int, RawMember]]:
    """Yield (position, member) pairs in declaration order."""
    for position, member in enumerate(decl.members):
        yield position, member


def is_eligible(member: RawMember) -> bool:
    if member.is_static:
        return False
    if member.visibility in RESTRICTED_VISIBILITIES:
        return False
    return True


def eligible_members(decl: InputDeclaration) -> List[RawMember]:
    """
    Stable filter over the declared members: type-level members and
    private/fileprivate members never reach the interface.
    """
    kept: List[RawMember] = []
    for position, member in scan_members(decl):
        if not is_eligible(member):
            reason = "static" if member.is_static else member.visibility
            logger.debug("%s: skipping member #%d %r (%s)", decl.name, position, member.name, reason)
            continue
        kept.append(member)
    return kept
