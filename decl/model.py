from dataclasses import dataclass, field
from typing import Literal, Optional, Tuple, Union

# ordered from most to least permissive
Visibility = Literal["public", "package", "internal", "fileprivate", "private"]

# record = struct, sum-type = enum, reference-type = class,
# isolation-unit = actor; anything else (protocol, extension, ...) is "other"
DeclKind = Literal["record", "sum-type", "reference-type", "isolation-unit", "other"]

StorageKind = Literal["immutable", "mutable", "computed"]

AccessMode = Literal["read-only", "read-write"]

Severity = Literal["error", "warning", "note"]

RESTRICTED_VISIBILITIES: Tuple[str, ...] = ("private", "fileprivate")


@dataclass
class SourceLocation:
    line: int = 1
    column: int = 1
    file: Optional[str] = None

    def __str__(self) -> str:
        prefix = f"{self.file}:" if self.file else ""
        return f"{prefix}{self.line}:{self.column}"


@dataclass
class RawMember:
    name: str
    type_annotation: Optional[str] = None   # verbatim type text (e.g. "(Int) async throws -> User")
    initializer: Optional[str] = None       # verbatim expression text (e.g. "\"default\"")
    storage: StorageKind = "mutable"
    accessors: Tuple[str, ...] = ()         # accessor keywords, e.g. ("get",), ("get", "set"), ("didSet",)
    visibility: Visibility = "internal"
    setter_visibility: Optional[Visibility] = None  # private(set) and friends
    is_static: bool = False
    location: SourceLocation = field(default_factory=SourceLocation)


@dataclass
class InputDeclaration:
    name: str
    kind: DeclKind = "record"
    visibility: Visibility = "internal"
    members: Tuple[RawMember, ...] = ()
    keyword: Optional[str] = None           # source keyword: struct / class / enum / actor / ...
    attributes: Tuple[str, ...] = ()        # e.g. ("ProtocolMirror",)
    location: SourceLocation = field(default_factory=SourceLocation)


@dataclass
class FunctionParameter:
    type_text: str
    first_name: Optional[str] = None
    second_name: Optional[str] = None

    @property
    def label(self) -> Optional[str]:
        """Caller-facing name, or None when the parameter is purely positional."""
        for candidate in (self.second_name, self.first_name):
            if candidate and candidate != "_":
                return candidate
        return None


@dataclass
class FunctionType:
    parameters: Tuple[FunctionParameter, ...]
    return_type: str
    is_async: bool = False
    is_throwing: bool = False
    thrown_type: Optional[str] = None       # typed throws: throws(MyError)


@dataclass
class ResolvedType:
    text: str
    function: Optional[FunctionType] = None

    @property
    def is_function(self) -> bool:
        return self.function is not None


@dataclass
class PropertyRequirement:
    name: str
    type: ResolvedType
    access: AccessMode = "read-only"
    source: Optional[str] = None            # originating member name


@dataclass
class MethodRequirement:
    name: str
    parameters: Tuple[Tuple[str, str], ...]  # (label, type text)
    return_type: str
    is_async: bool = False
    is_throwing: bool = False
    thrown_type: Optional[str] = None
    source: Optional[str] = None


Requirement = Union[PropertyRequirement, MethodRequirement]


@dataclass
class InterfaceSpec:
    owner: str                              # the record the interface is nested under
    name: str = "Protocol"
    visibility: Visibility = "internal"
    requirements: Tuple[Requirement, ...] = ()

    @property
    def qualified_name(self) -> str:
        return f"{self.owner}.{self.name}"


@dataclass
class Diagnostic:
    message: str
    location: SourceLocation
    severity: Severity = "error"
    domain: str = "ProtocolMirror"
    id: str = "unsupported-declaration"


@dataclass
class MirrorResult:
    declaration: InputDeclaration
    interface: Optional[InterfaceSpec] = None
    diagnostics: Tuple[Diagnostic, ...] = ()

    @property
    def ok(self) -> bool:
        return not any(d.severity == "error" for d in self.diagnostics)


@dataclass
class ConformanceDeclaration:
    type_name: str
    interface_name: str

    @property
    def qualified_interface(self) -> str:
        return f"{self.type_name}.{self.interface_name}"
