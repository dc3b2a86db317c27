# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-16
# Updated: 2026-01-29
# Description: test_chroma_vector_store.py
# -----------------------------------------------------------------------------
import uuid
from datetime import datetime, timedelta, timezone

import pytest

chromadb = pytest.importorskip("chromadb")

from config.Config import Config  # noqa: E402
from embedding.EmbeddingRecord import EmbeddingRecord, SourceType  # noqa: E402
from utility.errors import DimensionMismatchError  # noqa: E402
from vectorstore.ChromaVectorStore import ChromaVectorStore  # noqa: E402
from vectorstore.VectorStore import SearchOptions, VectorStore  # noqa: E402


@pytest.fixture(scope="module")
def chroma_client():
    return chromadb.EphemeralClient()


@pytest.fixture
def chroma_store(chroma_client) -> ChromaVectorStore:
    # one collection per test so tests never see each other's records
    return ChromaVectorStore(
        cfg=Config(),
        collection_name=f"test_{uuid.uuid4().hex[:12]}",
        client=chroma_client,
    )


def _rec(source_id, vec, namespace="room-a", source_type=SourceType.MESSAGE, **kw):
    return EmbeddingRecord(
        namespace_id=namespace,
        org_id="org-1",
        source_type=source_type,
        source_id=source_id,
        content=f"content of {source_id}",
        embedding=vec,
        **kw,
    )


def test_chroma_store_satisfies_protocol(chroma_store):
    assert isinstance(chroma_store, VectorStore)
    assert chroma_store.test_connection() is True


def test_search_ordering_and_threshold(chroma_store):
    chroma_store.create_batch([
        _rec("far", [1.0, 2.0, 0.0]),
        _rec("exact", [1.0, 0.0, 0.0]),
        _rec("near", [1.0, 1.0, 0.0]),
        _rec("ortho", [0.0, 1.0, 0.0]),
    ])

    hits = chroma_store.search_similar([1.0, 0.0, 0.0], SearchOptions(min_similarity=0.4))
    assert [h.record.source_id for h in hits] == ["exact", "near", "far"]
    assert hits[0].similarity == pytest.approx(1.0, abs=1e-5)


def test_metadata_and_timestamps_round_trip(chroma_store):
    created = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
    chroma_store.create(_rec(
        "m1", [1.0, 0.0], metadata={"author": "u1", "tags": ["a", "b"]}, created_at=created,
    ))

    found = chroma_store.find_by_source("message", "m1")
    assert len(found) == 1
    assert found[0].metadata == {"author": "u1", "tags": ["a", "b"]}
    assert found[0].created_at == created
    assert found[0].namespace_type == "room"


def test_namespace_and_source_type_filters(chroma_store):
    chroma_store.create(_rec("a1", [1.0, 0.0], namespace="A"))
    chroma_store.create(_rec("b1", [1.0, 0.0], namespace="B"))
    chroma_store.create(_rec("b2", [1.0, 0.0], namespace="B", source_type=SourceType.DOCUMENT))

    hits = chroma_store.search_similar([1.0, 0.0], SearchOptions(namespace_id="B"))
    assert {h.record.source_id for h in hits} == {"b1", "b2"}

    hits = chroma_store.search_similar(
        [1.0, 0.0], SearchOptions(namespace_ids=["A", "B"], source_types=[SourceType.DOCUMENT])
    )
    assert [h.record.source_id for h in hits] == ["b2"]


def test_ties_break_by_newest_first(chroma_store):
    now = datetime.now(timezone.utc)
    chroma_store.create(_rec("old", [1.0, 0.0], created_at=now - timedelta(days=1)))
    chroma_store.create(_rec("new", [1.0, 0.0], created_at=now))

    hits = chroma_store.search_similar([1.0, 0.0])
    assert [h.record.source_id for h in hits] == ["new", "old"]


def test_delete_counts_and_stats(chroma_store):
    chroma_store.create_batch([
        _rec("doc-1", [1.0, 0.0], source_type=SourceType.DOCUMENT, chunk_index=i, chunk_total=3)
        for i in range(3)
    ])
    chroma_store.create(_rec("m1", [0.0, 1.0]))

    stats = chroma_store.get_namespace_stats("room-a")
    assert stats.total_embeddings == 4
    assert stats.by_source_type == {"document": 3, "message": 1}
    assert chroma_store.count_by_namespace("room-a") == 4
    assert chroma_store.count_by_org("org-1") == 4

    assert chroma_store.exists_for_source("document", "doc-1")
    assert chroma_store.delete_by_source("document", "doc-1") == 3
    assert chroma_store.delete_by_source("document", "doc-1") == 0
    assert not chroma_store.exists_for_source("document", "doc-1")

    assert chroma_store.delete_by_namespace("room-a") == 1


def test_update_metadata(chroma_store):
    rec = chroma_store.create(_rec("m1", [1.0, 0.0]))

    assert chroma_store.update_metadata(rec.id, {"edited": True}) is True
    assert chroma_store.find_by_source("message", "m1")[0].metadata == {"edited": True}
    assert chroma_store.update_metadata("no-such-id", {"x": 1}) is False


def test_dimension_mismatch(chroma_store):
    chroma_store.create(_rec("m1", [1.0, 0.0, 0.0]))

    with pytest.raises(DimensionMismatchError):
        chroma_store.create(_rec("m2", [1.0, 0.0]))
    with pytest.raises(DimensionMismatchError):
        chroma_store.search_similar([1.0, 0.0])


def test_dimension_survives_emptying_the_collection(chroma_store):
    chroma_store.create(_rec("m1", [1.0, 0.0, 0.0]))
    assert chroma_store.delete_by_namespace("room-a") == 1

    with pytest.raises(DimensionMismatchError):
        chroma_store.create(_rec("m2", [1.0, 0.0, 0.0, 0.0]))
    chroma_store.create(_rec("m3", [0.0, 1.0, 0.0]))
    assert chroma_store.count_by_namespace("room-a") == 1
