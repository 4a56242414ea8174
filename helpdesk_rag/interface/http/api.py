"""HTTP API for ingestion, retrieval, RAG answers and chat orchestration.

Konsumierbare API ohne Business-Logik; pure Delegation an die Use-Cases.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any

from fastapi import Body, Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ...application.dto.chat_dto import ChatRequest
from ...application.dto.ingest_dto import IngestRequest
from ...application.dto.search_dto import SearchRequest
from ...config.composition import Services, build_services, chunking_params
from ...domain.errors import (
    DomainError,
    GenerationBackendError,
    UpsertTimeoutError,
    ValidationError,
)
from ...domain.rag_config import RAGConfig
from ...domain.services.chunking import ChunkingParams
from ...domain.workflow import (
    ExecutionContext,
    WorkflowEdge,
    WorkflowGraph,
    WorkflowNode,
    history_from,
)

logger = logging.getLogger(__name__)


# ---------- Request/response models ----------


class IngestRequestModel(BaseModel):
    content: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    chunk_size: int | None = None
    chunk_overlap: int | None = None


class IngestResponseModel(BaseModel):
    success: bool
    chunks_created: int
    message: str


class SearchRequestModel(BaseModel):
    query: str
    match_threshold: float | None = None
    match_count: int | None = None
    metadata_filter: dict[str, Any] | None = None


class SearchHitModel(BaseModel):
    id: str
    content: str
    metadata: dict[str, Any]
    similarity: float


class SearchResponseModel(BaseModel):
    results: list[SearchHitModel]
    count: int


class AnswerRequestModel(BaseModel):
    query: str
    rag_config: dict[str, Any]  # camelCase or snake_case
    node_id: str | None = None


class DeleteRequestModel(BaseModel):
    metadata_filter: dict[str, Any] | None = None


class SyncRequestModel(BaseModel):
    rag_config: dict[str, Any]


class HistoryTurnModel(BaseModel):
    role: str
    content: str


class ExecutionContextModel(BaseModel):
    business_id: str = "default"
    user_id: str = "anonymous"
    conversation_history: list[HistoryTurnModel] = Field(default_factory=list)


class EdgeModel(BaseModel):
    source: str
    target: str


class ChatRequestModel(BaseModel):
    message: str
    assistant_node_id: str
    nodes: list[dict[str, Any]] = Field(default_factory=list)
    edges: list[EdgeModel] | None = None
    context: ExecutionContextModel = Field(default_factory=ExecutionContextModel)


class ChatResponseModel(BaseModel):
    response: str
    intent: str
    method: str
    data: dict[str, Any]
    rag_context: dict[str, Any]


# ---------- Error mapping ----------


def status_for(error: DomainError) -> int:
    if isinstance(error, ValidationError):
        return 400
    if isinstance(error, UpsertTimeoutError):
        return 504
    if isinstance(error, GenerationBackendError):
        return 502
    return 500


async def domain_error_handler(_request: Request, exc: DomainError) -> JSONResponse:
    logger.error("%s: %s", type(exc).__name__, exc)
    body: dict[str, Any] = {"error": type(exc).__name__, "message": str(exc)}
    errors = getattr(exc, "errors", None)
    if errors:
        body["errors"] = list(errors)
    return JSONResponse(status_code=status_for(exc), content=body)


# ---------- App ----------


def get_services(request: Request) -> Services:
    return request.app.state.services


def create_app(services: Services | None = None) -> FastAPI:
    """Build the app; without ``services`` the adapters are composed from settings."""
    app = FastAPI(title="helpdesk-rag API", version="1.0.0")
    app.state.services = services
    app.add_exception_handler(DomainError, domain_error_handler)

    @app.on_event("startup")
    async def startup_event() -> None:
        if app.state.services is None:
            app.state.services = build_services()
            logging.basicConfig(level=app.state.services.settings.log_level)

    @app.post("/v1/rag/ingest", response_model=IngestResponseModel)
    def ingest(req: IngestRequestModel, svc: Services = Depends(get_services)):
        defaults = chunking_params(svc.settings)
        params = ChunkingParams(
            chunk_size=req.chunk_size or defaults.chunk_size,
            chunk_overlap=(
                defaults.chunk_overlap if req.chunk_overlap is None else req.chunk_overlap
            ),
        )
        result = svc.ingest.execute(
            IngestRequest(content=req.content, metadata=req.metadata, chunking=params)
        )
        if not result.ok:
            raise result.error
        n = result.value.chunks_created
        return IngestResponseModel(
            success=True,
            chunks_created=n,
            message=f"Successfully ingested document into {n} chunks",
        )

    @app.post("/v1/rag/search", response_model=SearchResponseModel)
    def search(req: SearchRequestModel, svc: Services = Depends(get_services)):
        s = svc.settings
        results = svc.search.execute(
            SearchRequest(
                query=req.query,
                match_threshold=(
                    s.default_match_threshold
                    if req.match_threshold is None
                    else req.match_threshold
                ),
                match_count=req.match_count or s.default_match_count,
                metadata_filter=req.metadata_filter,
            )
        )
        hits = [
            SearchHitModel(
                id=r.id, content=r.content, metadata=dict(r.metadata), similarity=r.similarity
            )
            for r in results
        ]
        return SearchResponseModel(results=hits, count=len(hits))

    @app.post("/v1/rag/answer")
    def answer(req: AnswerRequestModel, svc: Services = Depends(get_services)) -> dict[str, Any]:
        config = RAGConfig.from_mapping(req.rag_config)
        return asdict(svc.answer.execute(config, req.query, req.node_id))

    @app.delete("/v1/rag/documents")
    def delete_documents(
        req: DeleteRequestModel | None = Body(default=None),
        svc: Services = Depends(get_services),
    ) -> dict[str, Any]:
        metadata_filter = req.metadata_filter if req else None
        result = svc.delete.execute(metadata_filter)
        if not result.ok:
            raise result.error
        return {"success": True, "metadata_filter": metadata_filter}

    @app.post("/v1/rag/modules/{node_id}/sync")
    def sync_module(
        node_id: str, req: SyncRequestModel, svc: Services = Depends(get_services)
    ) -> dict[str, Any]:
        result = svc.sync_rag_module.execute(node_id, RAGConfig.from_mapping(req.rag_config))
        if not result.ok:
            raise result.error
        return {"success": True, "node_id": node_id, "chunks_created": result.value}

    @app.post("/v1/chat", response_model=ChatResponseModel)
    def chat(req: ChatRequestModel, svc: Services = Depends(get_services)):
        try:
            graph = WorkflowGraph.of(
                (WorkflowNode.from_mapping(n) for n in req.nodes),
                (WorkflowEdge(source=e.source, target=e.target) for e in req.edges or []),
            )
        except (KeyError, ValueError) as ex:
            raise ValidationError(f"Invalid workflow graph: {ex}") from ex
        ctx = ExecutionContext(
            business_id=req.context.business_id,
            user_id=req.context.user_id,
            conversation_history=history_from(
                [t.model_dump() for t in req.context.conversation_history]
            ),
        )
        result = svc.orchestrate.execute(
            ChatRequest(
                message=req.message,
                assistant_node_id=req.assistant_node_id,
                graph=graph,
                context=ctx,
            )
        )
        return ChatResponseModel(
            response=result.response,
            intent=result.intent,
            method=result.method,
            data=result.data,
            rag_context=asdict(result.rag_context),
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "healthy", "service": "helpdesk-rag"}

    return app


app = create_app()
