from __future__ import annotations

from typing import Optional, Sequence

import config
from decl.model import ConformanceDeclaration, InputDeclaration, InterfaceSpec, Requirement


def emit_interface(decl: InputDeclaration, requirements: Sequence[Requirement]) -> Optional[InterfaceSpec]:
    """
    Wrap the collected requirements (already in scan order, each property
    followed by its derived method) into one interface nested under the
    record. No requirements means no interface.

    The interface does not claim that the record conforms to it: the record
    name is still being defined while this runs, so conformance is a
    separate step through declare_conformance().
    """
    if not requirements:
        return None
    return InterfaceSpec(
        owner=decl.name,
        name=config.INTERFACE_NAME,
        visibility=decl.visibility,
        requirements=tuple(requirements),
    )


def declare_conformance(interface: InterfaceSpec) -> ConformanceDeclaration:
    return ConformanceDeclaration(type_name=interface.owner, interface_name=interface.name)
