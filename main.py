import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException # type: ignore
from pydantic import BaseModel, Field # type: ignore

import config
from decl.graph import build_mirror_graph
from decl.model import (
    AccessMode,
    DeclKind,
    InputDeclaration,
    MethodRequirement,
    MirrorResult,
    RawMember,
    SourceLocation,
    StorageKind,
    Visibility,
)
from mirror.emitter import declare_conformance
from mirror.pipeline import mirror_declaration
from protocol_rules import render_conformance, render_expansion, render_interface, render_requirement
from registry import swift_adapter, try_parse_best

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="Protocol Mirror (struct -> nested protocol)")


# ==============================================================================
# Models
# ==============================================================================
class MirrorRequest(BaseModel):
    code: str
    filename: str | None = None
    type_name: str | None = None      # mirror this declaration instead of the attributed ones
    conformance: bool = False         # also return the caller-side conformance line


class ExpandRequest(BaseModel):
    code: str
    filename: str | None = None
    conformance: bool = False


class LocationIn(BaseModel):
    line: int = 1
    column: int = 1
    file: str | None = None


class MemberIn(BaseModel):
    name: str
    type_annotation: Optional[str] = None
    initializer: Optional[str] = None
    storage: StorageKind = "mutable"
    accessors: List[str] = Field(default_factory=list)
    visibility: Visibility = "internal"
    setter_visibility: Optional[Visibility] = None
    is_static: bool = False
    location: LocationIn = Field(default_factory=LocationIn)


class DeclarationIn(BaseModel):
    name: str
    kind: DeclKind = "record"
    visibility: Visibility = "internal"
    members: List[MemberIn] = Field(default_factory=list)
    keyword: Optional[str] = None
    location: LocationIn = Field(default_factory=LocationIn)
    conformance: bool = False


class RequirementOut(BaseModel):
    kind: str                         # "property" | "method"
    name: str
    declaration: str                  # rendered Swift requirement
    access: Optional[AccessMode] = None


# ==============================================================================
# Helpers
# ==============================================================================
def _location(loc: LocationIn) -> SourceLocation:
    return SourceLocation(line=loc.line, column=loc.column, file=loc.file)


def _to_declaration(req: DeclarationIn) -> InputDeclaration:
    members = tuple(
        RawMember(
            name=m.name,
            type_annotation=m.type_annotation,
            initializer=m.initializer,
            storage=m.storage,
            accessors=tuple(m.accessors),
            visibility=m.visibility,
            setter_visibility=m.setter_visibility,
            is_static=m.is_static,
            location=_location(m.location),
        )
        for m in req.members
    )
    return InputDeclaration(
        name=req.name,
        kind=req.kind,
        visibility=req.visibility,
        members=members,
        keyword=req.keyword,
        location=_location(req.location),
    )


def _result_payload(result: MirrorResult, conformance: bool) -> Dict[str, Any]:
    decl = result.declaration
    requirements: List[RequirementOut] = []
    protocol_text = None
    conformance_text = None
    if result.interface is not None:
        protocol_text = render_interface(result.interface)
        if conformance:
            conformance_text = render_conformance(declare_conformance(result.interface))
        for req in result.interface.requirements:
            is_method = isinstance(req, MethodRequirement)
            requirements.append(
                RequirementOut(
                    kind="method" if is_method else "property",
                    name=req.name,
                    declaration=render_requirement(req),
                    access=None if is_method else req.access,
                )
            )

    return {
        "name": decl.name,
        "kind": decl.kind,
        "protocol": protocol_text,
        "conformance": conformance_text,
        "requirements": [r.model_dump() for r in requirements],
        "diagnostics": [
            {
                "message": d.message,
                "severity": d.severity,
                "id": f"{d.domain}.{d.id}",
                "line": d.location.line,
                "column": d.location.column,
                "file": d.location.file,
            }
            for d in result.diagnostics
        ],
        "graph": build_mirror_graph(decl, result).to_debug_json(),
    }


def _parse_units(code: str, filename: str | None):
    try:
        units = try_parse_best(code, filename)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if isinstance(units, dict):
        raise HTTPException(status_code=400, detail=units["error"])
    return units


# ==============================================================================
# Routes
# ==============================================================================
@app.get("/health")
def health():
    return {"ok": True}


@app.post("/mirror")
def mirror(req: MirrorRequest):
    units = _parse_units(req.code, req.filename)

    if req.type_name:
        unit = swift_adapter.find_unit(units, req.type_name)
        if unit is None:
            raise HTTPException(status_code=404, detail=f"Declaration not found: {req.type_name}")
        selected = [unit]
    else:
        selected = swift_adapter.mirrored_units(units)

    logger.info("mirror %s: %d declaration(s) selected", req.filename or "<input>", len(selected))
    results = [mirror_declaration(u.declaration) for u in selected]
    return {
        "attribute": config.MIRROR_ATTRIBUTE,
        "declarations": [_result_payload(r, req.conformance) for r in results],
    }


@app.post("/mirror/declaration")
def mirror_json(req: DeclarationIn):
    logger.info("mirror declaration %s (%s)", req.name, req.kind)
    result = mirror_declaration(_to_declaration(req))
    return _result_payload(result, req.conformance)


@app.post("/expand")
def expand(req: ExpandRequest):
    units = swift_adapter.mirrored_units(_parse_units(req.code, req.filename))
    results = {u.declaration.name: mirror_declaration(u.declaration) for u in units}
    expanded = render_expansion(req.code, units, results, conformance=req.conformance)
    diagnostics = [d.message for r in results.values() for d in r.diagnostics]
    return {"expanded": expanded, "diagnostics": diagnostics}
