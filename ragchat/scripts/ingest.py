"""
One-shot document ingestion.

Parses, chunks, embeds and stores a single document into the configured
vector index. Run out of band, before or alongside the API server; a running
server reloads the index on its next query and sees the new chunks:

    python -m ragchat.scripts.ingest path/to/document.pdf

Dependencies: python-dotenv, ragchat.core.rag, ragchat.boundary.llm, ragchat.configs
System role: Ingestion job CLI
"""

import argparse
import asyncio
import logging
import sys

from dotenv import load_dotenv

from ragchat.boundary.llm import get_provider
from ragchat.configs import Settings, get_settings
from ragchat.core.exceptions import RAGChatException
from ragchat.core.rag.pipeline import ConversationPipeline
from ragchat.core.rag.schemas import IngestionResult
from ragchat.observability import configure_logging

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_FILE = "./document.txt"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ragchat-ingest",
        description="Ingest a .txt, .md or .pdf document into the vector index.",
    )
    parser.add_argument(
        "file_path",
        nargs="?",
        default=DEFAULT_FILE,
        help=f"Document to ingest (default: {DEFAULT_FILE})",
    )
    return parser


async def run_ingestion(file_path: str, settings: Settings) -> IngestionResult:
    """
    Ingest one document with a fresh pipeline.

    Args:
        file_path: Document path
        settings: Application settings

    Returns:
        IngestionResult: Counts and chunk IDs
    """
    pipeline = ConversationPipeline(provider=get_provider(settings.llm), settings=settings)
    return await pipeline.ingest(file_path)


def main(argv: list[str] | None = None) -> int:
    """
    CLI entry point.

    Returns:
        int: Process exit code (0 on success, 1 on failure)
    """
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level)

    try:
        result = asyncio.run(run_ingestion(args.file_path, settings))
    except (RAGChatException, ValueError) as e:
        logger.error(f"{__name__}:main - Ingestion failed: {e}")
        return 1

    logger.info(
        f"{__name__}:main - Ingested {args.file_path}: "
        f"{result.document_count} documents, {result.chunk_count} chunks "
        f"in {result.processing_time_ms:.0f}ms"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
