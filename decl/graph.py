import networkx as nx # type: ignore
from dataclasses import asdict, is_dataclass
from typing import Any, Dict

from decl.model import InputDeclaration, MethodRequirement, MirrorResult


class MirrorGraph:
    """
    Typed multi-graph view of one mirror invocation.
    Nodes: TypeDecl, Member, Interface, Property, Method, Parameter, Diagnostic
    Edges: HAS_MEMBER, NESTED_IN, REQUIRES, MIRRORS, DERIVED_FROM,
           PARAM_OF, REPORTS
    """
    def __init__(self) -> None:
        self.g = nx.MultiDiGraph()

    def add_node(self, node_id: str, kind: str, payload: Any) -> None:
        self.g.add_node(node_id, kind=kind, payload=payload)

    def add_edge(self, src: str, dst: str, etype: str, **attrs: Any) -> None:
        """
        etype examples: HAS_MEMBER, NESTED_IN, REQUIRES, MIRRORS,
                        DERIVED_FROM, PARAM_OF, REPORTS
        """
        self.g.add_edge(src, dst, etype=etype, **attrs)

    def nodes_of_kind(self, kind: str) -> Dict[str, Any]:
        return {nid: data.get("payload") for nid, data in self.g.nodes(data=True) if data.get("kind") == kind}

    def to_debug_json(self) -> Dict[str, Any]:
        """
        Convert graph to JSON-like dict for debugging / API responses.
        """
        nodes = []
        for node_id, data in self.g.nodes(data=True):
            payload = data.get("payload")
            if is_dataclass(payload):
                attrs = asdict(payload)
            else:
                attrs = dict(payload) if isinstance(payload, dict) else {}
            nodes.append({
                "id": node_id,
                "kind": data.get("kind"),
                "attrs": attrs,
            })

        edges = []
        for src, dst, data in self.g.edges(data=True):
            extra = {k: v for k, v in data.items() if k != "etype"}
            edge = {
                "src": src,
                "dst": dst,
                "type": data.get("etype"),
            }
            if extra:
                edge["attrs"] = extra
            edges.append(edge)

        return {"nodes": nodes, "edges": edges}


def build_mirror_graph(decl: InputDeclaration, result: MirrorResult) -> MirrorGraph:
    graph = MirrorGraph()
    type_id = f"type:{decl.name}"
    graph.add_node(type_id, "TypeDecl", {
        "name": decl.name,
        "kind": decl.kind,
        "keyword": decl.keyword,
        "visibility": decl.visibility,
        "attributes": list(decl.attributes),
    })

    member_ids: Dict[str, str] = {}
    for member in decl.members:
        member_id = f"member:{decl.name}:{member.name}"
        member_ids[member.name] = member_id
        graph.add_node(member_id, "Member", member)
        graph.add_edge(type_id, member_id, "HAS_MEMBER")

    for i, diagnostic in enumerate(result.diagnostics):
        diag_id = f"diagnostic:{decl.name}:{i}"
        graph.add_node(diag_id, "Diagnostic", diagnostic)
        graph.add_edge(diag_id, type_id, "REPORTS")

    interface = result.interface
    if interface is None:
        return graph

    iface_id = f"interface:{interface.qualified_name}"
    graph.add_node(iface_id, "Interface", {
        "name": interface.name,
        "owner": interface.owner,
        "visibility": interface.visibility,
    })
    graph.add_edge(iface_id, type_id, "NESTED_IN")

    for order, req in enumerate(interface.requirements):
        if isinstance(req, MethodRequirement):
            req_id = f"method:{interface.qualified_name}:{req.name}"
            graph.add_node(req_id, "Method", req)
            for p_order, (label, type_text) in enumerate(req.parameters):
                p_id = f"param:{interface.qualified_name}:{req.name}:{label}"
                graph.add_node(p_id, "Parameter", {"label": label, "type": type_text})
                graph.add_edge(p_id, req_id, "PARAM_OF", order=p_order)
            property_id = f"property:{interface.qualified_name}:{req.name}"
            graph.add_edge(req_id, property_id, "DERIVED_FROM")
        else:
            req_id = f"property:{interface.qualified_name}:{req.name}"
            graph.add_node(req_id, "Property", req)
        graph.add_edge(iface_id, req_id, "REQUIRES", order=order)
        if req.source in member_ids:
            graph.add_edge(req_id, member_ids[req.source], "MIRRORS")

    return graph
