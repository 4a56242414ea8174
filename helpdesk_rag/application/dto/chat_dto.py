from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ...domain.models import RAGContextSummary
from ...domain.workflow import ExecutionContext, WorkflowGraph


@dataclass(frozen=True)
class ChatRequest:
    message: str
    assistant_node_id: str
    graph: WorkflowGraph
    context: ExecutionContext


@dataclass(frozen=True)
class ChatResult:
    response: str
    intent: str
    method: str
    data: dict[str, Any] = field(default_factory=dict)
    rag_context: RAGContextSummary = field(default_factory=RAGContextSummary)
