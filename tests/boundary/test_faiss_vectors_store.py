"""
Test suite for FAISSVectorsStore.

Runs against a real FAISS index under tmp_path with deterministic fake
embeddings.

System role: Verification of the vector index client
"""

import warnings
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from langchain_core.documents import Document
from langchain_core.embeddings import DeterministicFakeEmbedding

from ragchat.boundary.vdb.faiss_vectors_store import FAISSVectorsStore
from ragchat.boundary.vdb.vector_schemas import VectorSearchResult
from ragchat.core.exceptions import EmbeddingError, IndexUnavailableError


def make_chunk(content: str, chunk_id: str) -> Document:
    return Document(page_content=content, metadata={"chunk_id": chunk_id, "source": "test.txt"})


@pytest.fixture
def chunks() -> list[Document]:
    return [
        make_chunk("FAISS performs nearest neighbour search.", "c1"),
        make_chunk("Embeddings map text to vectors.", "c2"),
        make_chunk("Chunks overlap by two hundred characters.", "c3"),
        make_chunk("The answer synthesizer stuffs context.", "c4"),
    ]


@pytest.fixture
def store(fake_embeddings: DeterministicFakeEmbedding, index_dir: Path) -> FAISSVectorsStore:
    return FAISSVectorsStore.bind(fake_embeddings, index_dir=str(index_dir), index_name="test")


class TestBind:
    """Binding to persisted indexes."""

    def test_bind_without_index_is_empty_and_writes_nothing(self, store: FAISSVectorsStore, index_dir: Path) -> None:
        # Assert
        assert store.count == 0
        assert store.similarity_search("anything", k=2) == []
        assert not index_dir.exists()

    def test_bind_loads_persisted_index(
        self,
        fake_embeddings: DeterministicFakeEmbedding,
        index_dir: Path,
        chunks: list[Document],
    ) -> None:
        # Arrange
        FAISSVectorsStore.from_documents(chunks, fake_embeddings, index_dir=str(index_dir), index_name="test")

        # Act
        rebound = FAISSVectorsStore.bind(fake_embeddings, index_dir=str(index_dir), index_name="test")

        # Assert
        assert rebound.count == len(chunks)
        assert rebound.similarity_search(chunks[1].page_content, k=1)[0].chunk_id == "c2"

    def test_bind_corrupt_index_raises_index_unavailable(
        self,
        fake_embeddings: DeterministicFakeEmbedding,
        index_dir: Path,
    ) -> None:
        # Arrange
        index_dir.mkdir(parents=True)
        (index_dir / "test.faiss").write_bytes(b"garbage")
        (index_dir / "test.pkl").write_bytes(b"garbage")

        # Act / Assert
        with pytest.raises(IndexUnavailableError) as exc_info:
            FAISSVectorsStore.bind(fake_embeddings, index_dir=str(index_dir), index_name="test")

        assert exc_info.value.operation == "bind"


class TestUpsert:
    """Embedding and persisting chunks."""

    def test_upsert_stores_and_persists(self, store: FAISSVectorsStore, chunks: list[Document], index_dir: Path) -> None:
        # Act
        chunk_ids = store.upsert(chunks)

        # Assert
        assert chunk_ids == ["c1", "c2", "c3", "c4"]
        assert store.count == 4
        assert (index_dir / "test.faiss").exists()
        assert (index_dir / "test.pkl").exists()

    def test_upsert_is_idempotent_for_known_chunk_ids(self, store: FAISSVectorsStore, chunks: list[Document]) -> None:
        """Re-ingesting the same chunks adds nothing."""
        # Act
        store.upsert(chunks)
        chunk_ids = store.upsert(chunks)

        # Assert
        assert chunk_ids == ["c1", "c2", "c3", "c4"]
        assert store.count == 4

    def test_upsert_empty_batch_is_noop(self, store: FAISSVectorsStore, index_dir: Path) -> None:
        assert store.upsert([]) == []
        assert not index_dir.exists()

    def test_embedding_failure_writes_nothing(self, index_dir: Path, chunks: list[Document]) -> None:
        # Arrange
        embeddings = MagicMock()
        embeddings.embed_documents.side_effect = RuntimeError("quota exceeded")
        store = FAISSVectorsStore.bind(embeddings, index_dir=str(index_dir), index_name="test")

        # Act / Assert
        with pytest.raises(EmbeddingError):
            store.upsert(chunks)

        assert store.count == 0
        assert not index_dir.exists()

    def test_embedding_count_mismatch_is_rejected(self, index_dir: Path, chunks: list[Document]) -> None:
        """Fewer vectors than chunks is an error, never a silent drop."""
        # Arrange
        embeddings = MagicMock()
        embeddings.embed_documents.return_value = [[0.1] * 8]
        store = FAISSVectorsStore.bind(embeddings, index_dir=str(index_dir), index_name="test")

        # Act / Assert
        with pytest.raises(EmbeddingError) as exc_info:
            store.upsert(chunks)

        assert exc_info.value.details["expected"] == 4
        assert store.count == 0


class TestSimilaritySearch:
    """Top-k retrieval ordering."""

    def test_returns_at_most_k_results_in_descending_similarity(
        self,
        store: FAISSVectorsStore,
        chunks: list[Document],
    ) -> None:
        # Arrange
        store.upsert(chunks)

        # Act
        results = store.similarity_search("Embeddings map text to vectors.", k=2)

        # Assert
        assert len(results) == 2
        assert all(isinstance(result, VectorSearchResult) for result in results)
        assert results[0].chunk_id == "c2"
        scores = [result.similarity_score for result in results]
        assert scores == sorted(scores, reverse=True)
        assert {result.chunk_id for result in results} <= {"c1", "c2", "c3", "c4"}

    def test_k_larger_than_index_returns_everything(self, store: FAISSVectorsStore, chunks: list[Document]) -> None:
        store.upsert(chunks[:3])

        assert len(store.search("query", k=10)) == 3

    def test_equal_scores_come_back_in_insertion_order(self, store: FAISSVectorsStore) -> None:
        """Identical vectors are returned oldest first."""
        # Arrange
        store.upsert([make_chunk("same text", "first"), make_chunk("other text", "other")])
        store.upsert([make_chunk("same text", "second")])

        # Act
        results = store.similarity_search("same text", k=2)

        # Assert
        assert [result.chunk_id for result in results] == ["first", "second"]
        assert results[0].similarity_score == pytest.approx(results[1].similarity_score)

    def test_internal_ordering_metadata_is_not_exposed(self, store: FAISSVectorsStore, chunks: list[Document]) -> None:
        store.upsert(chunks)

        result = store.similarity_search("FAISS", k=1)[0]

        assert "insertion_seq" not in result.metadata
        assert result.metadata["source"] == "test.txt"

    def test_k_below_one_raises(self, store: FAISSVectorsStore) -> None:
        with pytest.raises(ValueError):
            store.similarity_search("query", k=0)

    def test_query_embedding_failure_raises_index_unavailable(
        self,
        store: FAISSVectorsStore,
        chunks: list[Document],
        fake_embeddings: DeterministicFakeEmbedding,
    ) -> None:
        # Arrange
        store.upsert(chunks)
        store._embeddings = MagicMock(wraps=fake_embeddings)
        store._embeddings.embed_query.side_effect = ConnectionError("network down")

        # Act / Assert
        with pytest.raises(IndexUnavailableError) as exc_info:
            store.similarity_search("query", k=2)

        assert exc_info.value.operation == "search"

    def test_identical_text_scores_cosine_one_without_normalization_warning(
        self,
        store: FAISSVectorsStore,
        chunks: list[Document],
    ) -> None:
        # Act
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            store.upsert(chunks)
            results = store.similarity_search(chunks[0].page_content, k=1)

        # Assert
        assert results[0].chunk_id == "c1"
        assert results[0].similarity_score == pytest.approx(1.0, abs=1e-4)
        assert not [w for w in caught if "Normaliz" in str(w.message)]


class TestExternalWrites:
    """Another process (the ingest job) writing the same index files."""

    @pytest.fixture
    def writer(self, fake_embeddings: DeterministicFakeEmbedding, index_dir: Path) -> FAISSVectorsStore:
        return FAISSVectorsStore.bind(fake_embeddings, index_dir=str(index_dir), index_name="test")

    def test_search_sees_index_created_after_bind(
        self,
        store: FAISSVectorsStore,
        writer: FAISSVectorsStore,
        chunks: list[Document],
    ) -> None:
        # Arrange
        assert store.similarity_search("FAISS", k=2) == []

        # Act
        writer.upsert(chunks)
        results = store.similarity_search(chunks[1].page_content, k=2)

        # Assert
        assert results[0].chunk_id == "c2"
        assert store.count == len(chunks)

    def test_search_sees_chunks_appended_after_load(
        self,
        store: FAISSVectorsStore,
        writer: FAISSVectorsStore,
        chunks: list[Document],
    ) -> None:
        # Arrange
        store.upsert(chunks[:2])

        # Act
        writer.upsert(chunks[2:])
        results = store.similarity_search(chunks[3].page_content, k=1)

        # Assert
        assert results[0].chunk_id == "c4"
        assert store.count == 4

    def test_upsert_through_stale_client_keeps_other_writes(
        self,
        fake_embeddings: DeterministicFakeEmbedding,
        store: FAISSVectorsStore,
        writer: FAISSVectorsStore,
        chunks: list[Document],
        index_dir: Path,
    ) -> None:
        # Arrange
        writer.upsert(chunks[:2])

        # Act
        store.upsert(chunks[2:])

        # Assert
        rebound = FAISSVectorsStore.bind(fake_embeddings, index_dir=str(index_dir), index_name="test")
        assert rebound.count == 4
