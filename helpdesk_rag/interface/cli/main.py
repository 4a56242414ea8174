"""helpdesk-rag CLI: ingest, search, ask and clear against the configured store."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from ...application.dto.ingest_dto import IngestRequest
from ...application.dto.search_dto import SearchRequest
from ...config.composition import Services, build_services, chunking_params
from ...config.settings import AppSettings
from ...domain.errors import DomainError
from ...domain.rag_config import RAGConfig, ResponseMode

logger = logging.getLogger(__name__)


def _metadata(args: argparse.Namespace) -> dict:
    meta = json.loads(args.metadata) if args.metadata else {}
    if not isinstance(meta, dict):
        raise ValueError("--metadata must be a JSON object")
    if args.category:
        meta["category"] = args.category
    return meta


def cmd_ingest(args: argparse.Namespace, services: Services) -> int:
    text = Path(args.file).read_text(encoding="utf-8") if args.file else args.text
    if not text:
        print("✗ Provide --file or --text")
        return 1
    meta = _metadata(args)
    if args.file:
        meta.setdefault("file_name", Path(args.file).name)
    result = services.ingest.execute(
        IngestRequest(content=text, metadata=meta, chunking=chunking_params(services.settings))
    )
    if not result.ok:
        print(f"✗ Ingest failed: {result.error}")
        return 1
    print(f"✓ Ingested {result.value.chunks_created} chunks")
    return 0


def cmd_search(args: argparse.Namespace, services: Services) -> int:
    results = services.search.execute(
        SearchRequest(
            query=args.query,
            match_threshold=args.threshold,
            match_count=args.count,
            metadata_filter={"category": args.category} if args.category else None,
        )
    )
    if not results:
        print("No results above threshold.")
        return 0
    for i, r in enumerate(results, 1):
        category = r.metadata.get("category", "-")
        print(f"[{i}] similarity={r.similarity:.3f} category={category}")
        print(f"    {r.content[:200]}")
    return 0


def cmd_ask(args: argparse.Namespace, services: Services) -> int:
    config = RAGConfig(
        response_mode=args.mode,
        category=args.category,
        match_threshold=args.threshold,
        match_count=args.count,
    )
    answer = services.answer.execute(config, args.question)
    print(answer.answer)
    if answer.has_context:
        print(f"\n(confidence={answer.confidence:.2f}, sources={len(answer.sources)})")
    return 0


def cmd_clear(args: argparse.Namespace, services: Services) -> int:
    if not args.category and not args.all:
        print("✗ Use --category to delete one category or --all to delete everything")
        return 1
    result = services.delete.execute({"category": args.category} if args.category else None)
    if not result.ok:
        print(f"✗ Delete failed: {result.error}")
        return 1
    print("✓ Deleted")
    return 0


def build_parser(settings: AppSettings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="helpdesk-rag",
        description="Document ingestion and retrieval for the support assistant",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    p_ingest = subparsers.add_parser("ingest", help="Chunk, embed and store a document")
    src = p_ingest.add_mutually_exclusive_group()
    src.add_argument("--file", help="Text file to ingest")
    src.add_argument("--text", help="Inline text to ingest")
    p_ingest.add_argument("--category", help="Metadata category")
    p_ingest.add_argument("--metadata", help="Extra metadata as JSON object")

    p_search = subparsers.add_parser("search", help="Similarity search")
    p_search.add_argument("query")
    p_search.add_argument("--threshold", type=float, default=settings.default_match_threshold)
    p_search.add_argument("--count", type=int, default=settings.default_match_count)
    p_search.add_argument("--category", help="Only search this category")

    p_ask = subparsers.add_parser("ask", help="Answer a question from the knowledge base")
    p_ask.add_argument("question")
    p_ask.add_argument(
        "--mode", choices=[m.value for m in ResponseMode], default=ResponseMode.CONCISE.value
    )
    p_ask.add_argument("--threshold", type=float, default=None)
    p_ask.add_argument("--count", type=int, default=None)
    p_ask.add_argument("--category", help="Only search this category")

    p_clear = subparsers.add_parser("clear", help="Delete stored documents")
    p_clear.add_argument("--category", help="Delete only this category")
    p_clear.add_argument("--all", action="store_true", help="Delete everything")
    return parser


COMMANDS = {
    "ingest": cmd_ingest,
    "search": cmd_search,
    "ask": cmd_ask,
    "clear": cmd_clear,
}


def main(argv: list[str] | None = None, services: Services | None = None) -> int:
    """Entry point; returns the exit code (0=success, 1=failure)."""
    settings = services.settings if services else AppSettings()
    logging.basicConfig(
        level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    parser = build_parser(settings)
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 1

    try:
        services = services or build_services(settings)
        return COMMANDS[args.command](args, services)
    except DomainError as ex:
        print(f"✗ {type(ex).__name__}: {ex}")
        return 1
    except (OSError, ValueError) as ex:
        print(f"✗ Error: {ex}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
