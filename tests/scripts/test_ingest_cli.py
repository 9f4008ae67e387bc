"""Tests for the ingestion CLI."""

from unittest.mock import AsyncMock, patch

import pytest

from ragchat.core.rag.schemas import IngestionResult
from ragchat.scripts import ingest


@pytest.fixture(autouse=True)
def no_logging_reconfiguration():
    with patch("ragchat.scripts.ingest.configure_logging"):
        yield


class TestIngestCli:

    def test_default_file_path(self) -> None:
        args = ingest.build_parser().parse_args([])

        assert args.file_path == "./document.txt"

    def test_success_returns_zero(self) -> None:
        # Arrange
        result = IngestionResult(
            file_path="notes.txt",
            document_count=1,
            chunk_count=3,
            processing_time_ms=12.5,
            chunk_ids=["a", "b", "c"],
        )

        # Act
        with patch("ragchat.scripts.ingest.run_ingestion", new=AsyncMock(return_value=result)) as run:
            exit_code = ingest.main(["notes.txt"])

        # Assert
        assert exit_code == 0
        assert run.call_args.args[0] == "notes.txt"

    def test_unsupported_file_returns_one(self) -> None:
        assert ingest.main(["report.docx"]) == 1

    def test_missing_file_returns_one(self, tmp_path) -> None:
        assert ingest.main([str(tmp_path / "absent.txt")]) == 1
