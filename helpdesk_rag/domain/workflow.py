"""Workflow graph snapshot and RAG-module lookup strategies.

The surrounding application owns the graph; the orchestrator receives a
read-only snapshot per request and only ever follows one hop.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .rag_config import RAGConfig

logger = logging.getLogger(__name__)


class NodeKind(str, Enum):
    GENAI_INTENT = "genai-intent"
    ROUTER = "router"
    MODULE = "module"
    RESPONSE = "response"
    RAG = "rag"


class ModuleKind(str, Enum):
    TRACKING = "tracking"
    CANCELLATION = "cancellation"
    FAQ = "faq"
    REFUND = "refund"
    RAG = "rag"
    SERVICE_ENQUIRY = "service-enquiry"


@dataclass(frozen=True)
class WorkflowNode:
    id: str
    kind: NodeKind
    module: ModuleKind | None = None
    rag_config: RAGConfig | None = None
    is_configured: bool = False
    label: str | None = None

    @property
    def is_rag_module(self) -> bool:
        # a bare "rag" node and a module node of type rag are the same thing
        if self.kind is NodeKind.RAG:
            return True
        return self.kind is NodeKind.MODULE and self.module is ModuleKind.RAG

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> WorkflowNode:
        """Parse a builder node (``{"id", "type", "data": {"moduleType"}, "ragConfig"}``)."""
        node_data = data.get("data") or {}
        module = data.get("module") or node_data.get("moduleType")
        rag_raw = data.get("rag_config") or data.get("ragConfig")
        return cls(
            id=str(data["id"]),
            kind=NodeKind(data.get("kind") or data.get("type")),
            module=ModuleKind(module) if module else None,
            rag_config=RAGConfig.from_mapping(rag_raw) if rag_raw else None,
            is_configured=bool(data.get("is_configured", data.get("isConfigured", False))),
            label=node_data.get("label"),
        )


@dataclass(frozen=True)
class WorkflowEdge:
    source: str
    target: str


@dataclass(frozen=True)
class WorkflowGraph:
    nodes: tuple[WorkflowNode, ...] = ()
    edges: tuple[WorkflowEdge, ...] = ()

    @classmethod
    def of(
        cls, nodes: Iterable[WorkflowNode], edges: Iterable[WorkflowEdge] | None = None
    ) -> WorkflowGraph:
        return cls(nodes=tuple(nodes), edges=tuple(edges or ()))

    def node(self, node_id: str) -> WorkflowNode | None:
        return next((n for n in self.nodes if n.id == node_id), None)

    def outgoing(self, node_id: str) -> list[WorkflowEdge]:
        return [e for e in self.edges if e.source == node_id]


@dataclass(frozen=True)
class ExecutionContext:
    business_id: str
    user_id: str
    conversation_history: tuple[tuple[str, str], ...] = field(default_factory=tuple)


# ---------- Lookup strategies ----------


class RAGLookupStrategy(str, Enum):
    EDGE = "edge"
    FALLBACK = "fallback"
    NONE = "none"


def find_connected_rag_module(node_id: str, graph: WorkflowGraph) -> WorkflowNode | None:
    """First RAG module reachable over one outgoing edge of ``node_id``."""
    if not graph.edges:
        return None
    for edge in graph.outgoing(node_id):
        target = graph.node(edge.target)
        if target is not None and target.is_rag_module:
            return target
    return None


def find_any_configured_rag_module(graph: WorkflowGraph) -> WorkflowNode | None:
    """Secondary lookup for graphs that wire a single RAG module without edges.

    Correct only when exactly one configured RAG module exists; with several,
    the first in node order wins.
    """
    candidates = [n for n in graph.nodes if n.is_rag_module and n.is_configured]
    if len(candidates) > 1:
        logger.warning(
            "Fallback lookup found %d configured RAG modules, using %s",
            len(candidates),
            candidates[0].id,
        )
    return candidates[0] if candidates else None


def locate_rag_module(
    node_id: str, graph: WorkflowGraph
) -> tuple[WorkflowNode | None, RAGLookupStrategy]:
    """Edge lookup first, then the named fallback strategy."""
    node = find_connected_rag_module(node_id, graph)
    if node is not None:
        return node, RAGLookupStrategy.EDGE
    node = find_any_configured_rag_module(graph)
    if node is not None:
        logger.warning(
            "No edge from %s to a RAG module; using configured module %s (graph may be malformed)",
            node_id,
            node.id,
        )
        return node, RAGLookupStrategy.FALLBACK
    return None, RAGLookupStrategy.NONE


def history_from(turns: Sequence[Mapping[str, str]] | None) -> tuple[tuple[str, str], ...]:
    """Convert ``[{"role": ..., "content": ...}]`` into immutable turns."""
    return tuple((str(t.get("role", "user")), str(t.get("content", ""))) for t in turns or ())
