from __future__ import annotations

from decl.model import AccessMode, RawMember, ResolvedType

READ_ONLY: AccessMode = "read-only"
READ_WRITE: AccessMode = "read-write"

SETTER_ACCESSORS = ("set", "_modify", "unsafeMutableAddress")
OBSERVER_ACCESSORS = ("willSet", "didSet")


def has_setter(member: RawMember) -> bool:
    return any(a in SETTER_ACCESSORS for a in member.accessors)


def only_observers(member: RawMember) -> bool:
    return bool(member.accessors) and all(a in OBSERVER_ACCESSORS for a in member.accessors)


def classify_access(member: RawMember, resolved: ResolvedType) -> AccessMode:
    """
    Function-valued members model injected behaviour and are never settable
    through the interface, whatever their storage.
    """
    if resolved.is_function:
        return READ_ONLY
    if member.storage == "immutable":
        return READ_ONLY
    if member.storage == "computed":
        return READ_WRITE if has_setter(member) else READ_ONLY

    # stored var, possibly observed
    if member.accessors and not only_observers(member) and not has_setter(member):
        return READ_ONLY
    return READ_WRITE
