"""
FAISS vector index client.

Wraps LangChain FAISS with an inner-product index over L2-normalised vectors
(cosine similarity), persisted to a local directory.

Binding to an existing index (``bind``) and creating-and-populating one
(``from_documents``) are separate operations. Ingestion only appends; stored
vectors are never rewritten.

The persisted files are the source of truth: when another process (the
ingest job) rewrites them, the next search or upsert reloads them first.

Dependencies: faiss-cpu, numpy, langchain_community.vectorstores, ragchat.boundary.vdb.vector_schemas
System role: Vector store adapter for ingestion and retrieval
"""

import logging
import threading
from pathlib import Path

import faiss
import numpy as np
from langchain_community.vectorstores import FAISS
from langchain_community.vectorstores.utils import DistanceStrategy
from langchain_core.documents import Document
from langchain_core.embeddings import Embeddings

from ragchat.boundary.vdb.vector_schemas import RetrievalResult, VectorSearchResult
from ragchat.core.exceptions import EmbeddingError, IndexUnavailableError, VectorStoreError

logger = logging.getLogger(__name__)

# Extra candidates fetched so equal-score neighbours can be reordered by insertion.
_TIE_FETCH_FACTOR = 2

# (mtime_ns, size) per index file; None for a missing file.
FileSignature = tuple[tuple[int, int] | None, ...]


def normalize_vectors(vectors: list[list[float]]) -> list[list[float]]:
    """Unit-length copies of ``vectors`` so inner product equals cosine similarity."""
    matrix = np.array(vectors, dtype=np.float32)
    if matrix.ndim == 1:
        matrix = matrix.reshape(1, -1)
    faiss.normalize_L2(matrix)
    return matrix.tolist()


class FAISSVectorsStore:
    """
    FAISS vector index client.

    Results are ordered by descending cosine similarity; records with equal
    similarity come back in the order they were inserted.
    """

    def __init__(
        self,
        embeddings: Embeddings,
        index_dir: str = ".faiss_index",
        index_name: str = "documents",
    ) -> None:
        """
        Initialize an unbound client. Use ``bind`` or ``from_documents``.

        Args:
            embeddings: LangChain embedding model for chunks and queries
            index_dir: Directory for index persistence
            index_name: Index file stem inside index_dir
        """
        self._embeddings = embeddings
        self._index_dir = Path(index_dir)
        self._index_name = index_name
        self._vector_store: FAISS | None = None
        self._loaded_signature: FileSignature | None = None
        self._write_lock = threading.Lock()

    @classmethod
    def bind(
        cls,
        embeddings: Embeddings,
        index_dir: str = ".faiss_index",
        index_name: str = "documents",
    ) -> "FAISSVectorsStore":
        """
        Bind to an existing persisted index without writing anything.

        An absent index yields an empty client whose searches return [].

        Raises:
            IndexUnavailableError: Index files exist but cannot be loaded
        """
        store = cls(embeddings, index_dir=index_dir, index_name=index_name)
        with store._write_lock:
            store._load()
        return store

    @classmethod
    def from_documents(
        cls,
        chunks: list[Document],
        embeddings: Embeddings,
        index_dir: str = ".faiss_index",
        index_name: str = "documents",
    ) -> "FAISSVectorsStore":
        """
        Create (or open) the persisted index and populate it with chunks.

        Raises:
            IndexUnavailableError: Existing index files cannot be loaded
            EmbeddingError: Embedding the chunks failed (nothing written)
            VectorStoreError: Writing the index failed
        """
        store = cls.bind(embeddings, index_dir=index_dir, index_name=index_name)
        store.upsert(chunks)
        return store

    @property
    def count(self) -> int:
        """Number of stored records."""
        if self._vector_store is None:
            return 0
        return self._vector_store.index.ntotal

    def _index_paths(self) -> tuple[Path, Path]:
        # save_local writes the .faiss file first and the .pkl docstore last.
        return (
            self._index_dir / f"{self._index_name}.faiss",
            self._index_dir / f"{self._index_name}.pkl",
        )

    def _disk_signature(self) -> FileSignature:
        signature = []
        for path in self._index_paths():
            try:
                stat = path.stat()
            except FileNotFoundError:
                signature.append(None)
            else:
                signature.append((stat.st_mtime_ns, stat.st_size))
        return tuple(signature)

    def _load(self) -> None:
        """(Re)load the persisted index. Caller holds ``_write_lock``."""
        signature = self._disk_signature()
        if signature[0] is None:
            logger.info(
                f"{__name__}:_load - No index at {self._index_dir}/{self._index_name}, bound empty"
            )
            self._vector_store = None
            self._loaded_signature = signature
            return

        try:
            self._vector_store = FAISS.load_local(
                str(self._index_dir),
                self._embeddings,
                index_name=self._index_name,
                allow_dangerous_deserialization=True,
                distance_strategy=DistanceStrategy.MAX_INNER_PRODUCT,
            )
        except Exception as e:
            logger.error(f"{__name__}:_load - FAILED: {type(e).__name__}: {e}")
            raise IndexUnavailableError(
                f"Failed to load vector index: {e}",
                operation="bind",
                details={"index_dir": str(self._index_dir), "index_name": self._index_name},
            ) from e

        self._loaded_signature = signature
        logger.info(f"{__name__}:_load - Loaded index with {self.count} records")

    def _reload_if_changed(self) -> None:
        """Pick up writes made by another process. Caller holds ``_write_lock``."""
        if self._disk_signature() == self._loaded_signature:
            return
        logger.info(f"{__name__}:_reload_if_changed - Index files changed on disk, reloading")
        self._load()

    def refresh(self) -> None:
        """Reload the index if its files changed since this client last read or wrote them."""
        if self._disk_signature() == self._loaded_signature:
            return
        with self._write_lock:
            self._reload_if_changed()

    def upsert(self, chunks: list[Document]) -> list[str]:
        """
        Embed and persist chunks.

        All chunk contents are embedded before anything is written, so an
        embedding failure leaves the index untouched. Chunks whose chunk_id is
        already stored are skipped (re-ingesting a file is idempotent).

        Args:
            chunks: Chunked documents carrying a ``chunk_id`` in metadata

        Returns:
            list[str]: chunk IDs of every input chunk

        Raises:
            IndexUnavailableError: Index changed on disk and could not be reloaded
            EmbeddingError: Embedding call failed or returned the wrong count
            VectorStoreError: Adding or persisting the vectors failed
        """
        if not chunks:
            return []

        with self._write_lock:
            self._reload_if_changed()

            chunk_ids = [chunk.metadata.get("chunk_id") or f"chunk-{i}" for i, chunk in enumerate(chunks)]
            pending = self._pending_chunks(chunks, chunk_ids)

            if not pending:
                logger.info(f"{__name__}:upsert - All {len(chunks)} chunks already indexed")
                return chunk_ids

            texts = [chunk.page_content for _, chunk in pending]
            try:
                vectors = self._embeddings.embed_documents(texts)
            except Exception as e:
                raise EmbeddingError(
                    f"Failed to generate embeddings: {e}",
                    details={"chunk_count": len(texts)},
                ) from e

            if len(vectors) != len(texts):
                raise EmbeddingError(
                    "Embedding model returned a different number of vectors than chunks",
                    details={"expected": len(texts), "received": len(vectors)},
                )

            next_seq = self.count
            ids = [chunk_id for chunk_id, _ in pending]
            metadatas = []
            for offset, (_, chunk) in enumerate(pending):
                metadata = dict(chunk.metadata)
                metadata["insertion_seq"] = next_seq + offset
                metadatas.append(metadata)

            try:
                text_embeddings = list(zip(texts, normalize_vectors(vectors)))
                if self._vector_store is None:
                    self._vector_store = FAISS.from_embeddings(
                        text_embeddings,
                        self._embeddings,
                        metadatas=metadatas,
                        ids=ids,
                        distance_strategy=DistanceStrategy.MAX_INNER_PRODUCT,
                    )
                else:
                    self._vector_store.add_embeddings(text_embeddings, metadatas=metadatas, ids=ids)

                self._index_dir.mkdir(parents=True, exist_ok=True)
                self._vector_store.save_local(str(self._index_dir), index_name=self._index_name)
            except Exception as e:
                logger.exception(
                    "Failed to write vectors to FAISS index",
                    extra={"chunk_count": len(ids), "index_dir": str(self._index_dir)},
                )
                raise VectorStoreError(
                    f"Failed to upsert chunks: {e}",
                    operation="upsert",
                    details={"chunk_count": len(ids)},
                ) from e

            self._loaded_signature = self._disk_signature()
            logger.info(
                f"{__name__}:upsert - Stored {len(ids)} chunks ({len(chunks) - len(ids)} already present)",
                extra={"index_dir": str(self._index_dir), "total": self.count},
            )
            return chunk_ids

    def _pending_chunks(self, chunks: list[Document], chunk_ids: list[str]) -> list[tuple[str, Document]]:
        """Chunks not yet stored, first occurrence wins within the batch."""
        stored = set(self._vector_store.index_to_docstore_id.values()) if self._vector_store else set()
        pending = []
        for chunk_id, chunk in zip(chunk_ids, chunks):
            if chunk_id in stored:
                continue
            stored.add(chunk_id)
            pending.append((chunk_id, chunk))
        return pending

    def similarity_search(self, query: str, k: int = 2) -> RetrievalResult:
        """
        Search for the k chunks most similar to the query.

        Args:
            query: Search query text
            k: Maximum number of results

        Returns:
            RetrievalResult: Results by descending similarity, ties by insertion order

        Raises:
            ValueError: k is smaller than 1
            IndexUnavailableError: Index reload, query embedding or index search failed
        """
        if k < 1:
            raise ValueError(f"k must be >= 1, got {k}")

        self.refresh()
        vector_store = self._vector_store
        if vector_store is None or vector_store.index.ntotal == 0:
            logger.info(f"{__name__}:similarity_search - Index empty, no results")
            return []

        logger.info(f"{__name__}:similarity_search - START: query_len={len(query)}, k={k}")
        try:
            query_vector = normalize_vectors([self._embeddings.embed_query(query)])[0]
            fetch_k = min(vector_store.index.ntotal, k * _TIE_FETCH_FACTOR)
            results = vector_store.similarity_search_with_score_by_vector(query_vector, k=fetch_k)
        except Exception as e:
            logger.error(f"{__name__}:similarity_search - FAILED: {type(e).__name__}: {e}")
            raise IndexUnavailableError(
                f"Vector search failed: {e}",
                operation="search",
                details={"k": k},
            ) from e

        ordered = sorted(
            results,
            key=lambda pair: (-float(pair[1]), pair[0].metadata.get("insertion_seq", 0)),
        )[:k]

        search_results = [VectorSearchResult.from_scored_document(doc, score) for doc, score in ordered]
        logger.info(f"{__name__}:similarity_search - SUCCESS: {len(search_results)} results")
        return search_results

    search = similarity_search
