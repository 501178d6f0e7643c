"""In-memory mind map editor

Holds the canonical node/edge collection and wires the user actions (add,
delete, connect, inline edit, verify all, regenerate one, export) to the API.
Transport failures are reported through the alert hook and leave the state
untouched.
"""

import logging
import random
import time
from typing import Any, Callable, Dict, List, Optional

import requests
from flask.logging import default_handler

from .client import MindMapClient
from .export import export_jpeg, export_pdf, render_canvas
from .fallbacks import edge_dict
from .models import CALLBACK_PLACEHOLDER, Edge, Node, NodeData, Position, Verdict

NEW_NODE_LABEL = "New Concept"

logger = logging.getLogger("app.editor")
logger.addHandler(default_handler)


def _log_alert(message: str) -> None:
    logger.error(message)


class InlineEdit:
    """Text box opened by double-clicking a node, seeded with its label"""

    def __init__(self, editor: "MindMapEditor", node_id: str, draft: str):
        self.editor = editor
        self.node_id = node_id
        self.draft = draft
        self.active = True

    def handle_key(self, key: str, ctrl: bool = False) -> bool:
        """Ctrl+Enter commits, anything else keeps editing"""
        if key == "Enter" and ctrl:
            self.commit()
            return True
        return False

    def blur(self) -> None:
        self.commit()

    def commit(self) -> None:
        if not self.active:
            return
        self.active = False
        self.editor.edit_label(self.node_id, self.draft)


class MindMapEditor:
    def __init__(
        self,
        nodes: Optional[List[Node]] = None,
        edges: Optional[List[Edge]] = None,
        client: Optional[MindMapClient] = None,
        alert: Optional[Callable[[str], None]] = None,
    ):
        self.nodes: List[Node] = []
        self.edges: List[Edge] = list(edges or [])
        self.client = client or MindMapClient()
        self.alert = alert or _log_alert
        self.selected: Optional[str] = None
        self.is_verifying = False
        self.verification_results: Dict[str, Any] = {}

        for node in nodes or []:
            self._attach_callbacks(node)
            self.nodes.append(node)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], **kwargs) -> "MindMapEditor":
        nodes = [Node.model_validate(n) for n in data.get("nodes", [])]
        edges = [Edge.model_validate(e) for e in data.get("edges", [])]
        return cls(nodes, edges, **kwargs)

    @staticmethod
    def node_to_wire(node: Node) -> Dict[str, Any]:
        wire = node.model_dump(
            by_alias=True,
            exclude_none=True,
            exclude={"data": {"on_edit", "on_regenerate"}},
        )
        wire["data"]["onEdit"] = CALLBACK_PLACEHOLDER
        wire["data"]["onRegenerate"] = CALLBACK_PLACEHOLDER
        return wire

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            "nodes": [self.node_to_wire(n) for n in self.nodes],
            "edges": [e.model_dump(by_alias=True, exclude_none=True) for e in self.edges],
        }

    def _attach_callbacks(self, node: Node) -> None:
        node.data.on_edit = self.edit_label
        node.data.on_regenerate = self.regenerate

    def get_node(self, node_id: str) -> Optional[Node]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def add_node(self) -> Node:
        node = Node(
            id=f"node-{int(time.time() * 1000)}",
            position=Position(x=random.random() * 400 + 100, y=random.random() * 400 + 100),
            data=NodeData(label=NEW_NODE_LABEL),
        )
        self._attach_callbacks(node)
        self.nodes.append(node)
        return node

    def select(self, node_id: Optional[str]) -> None:
        self.selected = node_id

    def delete_node(self, node_id: str) -> None:
        """Remove a node together with every edge touching it"""
        self.nodes = [n for n in self.nodes if n.id != node_id]
        self.edges = [e for e in self.edges if e.source != node_id and e.target != node_id]

    def delete_selected(self) -> bool:
        if not self.selected:
            return False
        self.delete_node(self.selected)
        self.selected = None
        return True

    def connect(self, source: str, target: str) -> Optional[Edge]:
        """Draw an edge between two nodes, an existing identical edge is kept as is"""
        if self.get_node(source) is None or self.get_node(target) is None:
            raise KeyError(f"Cannot connect {source} -> {target}: unknown node")

        for edge in self.edges:
            if edge.source == source and edge.target == target:
                return None

        edge_id = base_id = f"e{source}-{target}"
        taken = {e.id for e in self.edges}
        suffix = 2
        while edge_id in taken:
            edge_id = f"{base_id}-{suffix}"
            suffix += 1

        edge = Edge.model_validate(edge_dict(edge_id, source, target))
        self.edges.append(edge)
        return edge

    def edit_label(self, node_id: str, label: str) -> None:
        node = self.get_node(node_id)
        if node is not None and node.data.label != label:
            node.data.label = label

    def begin_edit(self, node_id: str) -> InlineEdit:
        node = self.get_node(node_id)
        if node is None:
            raise KeyError(node_id)
        return InlineEdit(self, node_id, node.data.label)

    def verify_all(self) -> bool:
        self.is_verifying = True
        try:
            results = self.client.verify_medical([self.node_to_wire(n) for n in self.nodes])
            verdicts = {
                node_id: Verdict.model_validate(verdict) for node_id, verdict in results.items()
            }
        except (requests.RequestException, ValueError, AttributeError) as ex:
            logger.warning("Verification request failed: %s", ex)
            self.alert("Failed to verify medical accuracy")
            return False
        finally:
            self.is_verifying = False

        self.verification_results = results
        for node in self.nodes:
            node.data.verification = verdicts.get(node.id)
        return True

    def regenerate(self, node_id: str) -> bool:
        node = self.get_node(node_id)
        if node is None:
            return False

        try:
            result = self.client.regenerate_node(self.node_to_wire(node))
            label, sources = result["newContent"], list(result["sources"])
        except (requests.RequestException, ValueError, KeyError, TypeError) as ex:
            logger.warning("Regeneration request for %s failed: %s", node_id, ex)
            self.alert("Failed to regenerate node")
            return False

        node.data.label = label
        node.data.sources = sources
        node.data.verification = Verdict(verified=True, confidence="high")
        return True

    def render(self, scale: int = 2):
        return render_canvas(self.nodes, self.edges, scale=scale)

    def export_jpeg(self, path: str = "mindmap.jpg"):
        try:
            return export_jpeg(self.render(), path)
        except (OSError, ValueError) as ex:
            logger.warning("JPEG export failed: %s", ex)
            self.alert("Failed to export as JPEG")
            return None

    def export_pdf(self, path: str = "mindmap.pdf"):
        try:
            return export_pdf(self.render(), path)
        except (OSError, ValueError) as ex:
            logger.warning("PDF export failed: %s", ex)
            self.alert("Failed to export as PDF")
            return None
