"""RAG module configuration, validation and defaults.

A RAG module is configured from the workflow builder; the same payload arrives
here either in camelCase (UI) or snake_case (CLI, tests).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

DEFAULT_FALLBACK_MESSAGE = (
    "I couldn't find specific information about that. Please contact support for assistance."
)
DEFAULT_MATCH_THRESHOLD = 0.7
DEFAULT_MATCH_COUNT = 3


class DocumentMode(str, Enum):
    EXISTING = "existing"
    UPLOAD = "upload"
    PASTE = "paste"


class ResponseMode(str, Enum):
    CONCISE = "concise"
    DETAILED = "detailed"
    RAW = "raw"


@dataclass(frozen=True)
class UploadedFile:
    name: str
    content: str
    type: str = "txt"


@dataclass(frozen=True)
class RAGConfig:
    """Per-module retrieval settings.

    ``response_mode`` is kept as given so that validation can report unknown
    values instead of failing at construction time.
    """

    response_mode: str | None
    document_mode: str | None = DocumentMode.EXISTING.value
    document_content: str | None = None
    uploaded_files: tuple[UploadedFile, ...] = ()
    category: str | None = None
    match_threshold: float | None = None
    match_count: int | None = None
    fallback_message: str | None = None

    @property
    def effective_threshold(self) -> float:
        return DEFAULT_MATCH_THRESHOLD if self.match_threshold is None else self.match_threshold

    @property
    def effective_count(self) -> int:
        return DEFAULT_MATCH_COUNT if self.match_count is None else self.match_count

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> RAGConfig:
        """Build a config from a camelCase or snake_case mapping."""

        def pick(snake: str, camel: str) -> Any:
            if snake in data:
                return data[snake]
            return data.get(camel)

        files = pick("uploaded_files", "uploadedFiles") or []
        threshold = pick("match_threshold", "matchThreshold")
        count = pick("match_count", "matchCount")
        return cls(
            response_mode=pick("response_mode", "responseMode"),
            document_mode=pick("document_mode", "documentMode") or DocumentMode.EXISTING.value,
            document_content=pick("document_content", "documentContent"),
            uploaded_files=tuple(_to_file(f) for f in files),
            category=data.get("category") or None,
            match_threshold=_to_float(threshold),
            match_count=_to_int(count),
            fallback_message=pick("fallback_message", "fallbackMessage"),
        )


def _to_file(value: Any) -> UploadedFile:
    if isinstance(value, UploadedFile):
        return value
    return UploadedFile(
        name=str(value.get("name", "")),
        content=str(value.get("content", "")),
        type=str(value.get("type", "txt")),
    )


def _to_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return float("nan")


def _to_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return -1


_RESPONSE_MODES = tuple(m.value for m in ResponseMode)
_DOCUMENT_MODES = tuple(m.value for m in DocumentMode)


def validate_retrieval_settings(config: RAGConfig) -> list[str]:
    """Checks needed before any retrieval call (response mode, threshold, count)."""
    errors: list[str] = []

    if not config.response_mode:
        errors.append("Response mode is required")
    elif config.response_mode not in _RESPONSE_MODES:
        errors.append(
            f'Invalid response mode: "{config.response_mode}". '
            f"Must be one of: {', '.join(_RESPONSE_MODES)}"
        )

    if config.match_threshold is not None:
        t = config.match_threshold
        if t != t or t < 0 or t > 1:  # NaN check first
            errors.append("Match threshold must be a number between 0 and 1")

    if config.match_count is not None and not 1 <= config.match_count <= 10:
        errors.append("Match count must be a number between 1 and 10")

    return errors


def validate_rag_config(config: RAGConfig) -> list[str]:
    """Full builder-side validation, including the document source."""
    errors: list[str] = []

    if not config.document_mode:
        errors.append("Input mode is required")
    elif config.document_mode not in _DOCUMENT_MODES:
        errors.append(f'Invalid input mode: "{config.document_mode}"')
    else:
        pasted = (config.document_content or "").strip()
        if config.document_mode == DocumentMode.PASTE.value and not pasted:
            errors.append('Document content is required when using "Paste Text" mode')
        if config.document_mode == DocumentMode.UPLOAD.value and not config.uploaded_files:
            errors.append(
                'At least one file must be uploaded when using "Upload Documents" mode'
            )

    errors.extend(validate_retrieval_settings(config))
    return errors


def is_configured(config: RAGConfig | None) -> bool:
    if config is None or not config.document_mode or not config.response_mode:
        return False
    pasted = (config.document_content or "").strip()
    if config.document_mode == DocumentMode.PASTE.value and not pasted:
        return False
    if config.document_mode == DocumentMode.UPLOAD.value and not config.uploaded_files:
        return False
    return True


def default_rag_config() -> RAGConfig:
    return RAGConfig(
        response_mode=ResponseMode.CONCISE.value,
        document_mode=DocumentMode.EXISTING.value,
        document_content="",
        uploaded_files=(),
        category=None,
        match_threshold=DEFAULT_MATCH_THRESHOLD,
        match_count=DEFAULT_MATCH_COUNT,
        fallback_message=DEFAULT_FALLBACK_MESSAGE,
    )


@dataclass(frozen=True)
class RAGModuleSettings:
    """Resolved search parameters for one module instance."""

    match_threshold: float = DEFAULT_MATCH_THRESHOLD
    match_count: int = DEFAULT_MATCH_COUNT
    metadata_filter: dict[str, Any] = field(default_factory=dict)


def node_category(node_id: str) -> str:
    """Metadata category under which a module instance stores its documents."""
    return f"rag-module-{node_id}"


def resolve_module_settings(config: RAGConfig, node_id: str | None = None) -> RAGModuleSettings:
    """Per-node category overrides the configured one, so each instance only
    ever searches its own ingested documents."""
    category = node_category(node_id) if node_id else config.category
    return RAGModuleSettings(
        match_threshold=config.effective_threshold,
        match_count=config.effective_count,
        metadata_filter={"category": category} if category else {},
    )
