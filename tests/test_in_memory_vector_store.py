# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-24
# Description: test_in_memory_vector_store.py
# -----------------------------------------------------------------------------
from datetime import datetime, timedelta, timezone

import numpy as np
import pytest

from embedding.EmbeddingRecord import EmbeddingRecord, SourceType
from utility.errors import DimensionMismatchError
from vectorstore.InMemoryVectorStore import InMemoryVectorStore
from vectorstore.VectorStore import SearchOptions, VectorStore
from vectorstore.similarity import cosine_similarity


def _rec(source_id, vec, namespace="room-a", org="org-1", source_type=SourceType.MESSAGE, **kw):
    return EmbeddingRecord(
        namespace_id=namespace,
        org_id=org,
        source_type=source_type,
        source_id=source_id,
        content=f"content of {source_id}",
        embedding=vec,
        **kw,
    )


def test_in_memory_store_satisfies_protocol():
    assert isinstance(InMemoryVectorStore(), VectorStore)


def test_cosine_similarity_basics():
    assert cosine_similarity([1, 0], [1, 0]) == pytest.approx(1.0)
    assert cosine_similarity([1, 0], [0, 1]) == pytest.approx(0.0)
    assert cosine_similarity([0, 0], [1, 1]) == 0.0
    with pytest.raises(DimensionMismatchError):
        cosine_similarity([1, 0], [1, 0, 0])


def test_search_orders_by_similarity_and_applies_threshold(store):
    store.create_batch([
        _rec("far", [1.0, 2.0, 0.0]),    # 0.447
        _rec("exact", [1.0, 0.0, 0.0]),  # 1.0
        _rec("near", [1.0, 1.0, 0.0]),   # 0.707
        _rec("ortho", [0.0, 1.0, 0.0]),  # 0.0
    ])

    hits = store.search_similar([1.0, 0.0, 0.0], SearchOptions(min_similarity=0.4))
    assert [h.record.source_id for h in hits] == ["exact", "near", "far"]
    sims = [h.similarity for h in hits]
    assert sims == sorted(sims, reverse=True)

    hits = store.search_similar([1.0, 0.0, 0.0], SearchOptions(min_similarity=0.7))
    assert [h.record.source_id for h in hits] == ["exact", "near"]


def test_limit_caps_results(store):
    store.create_batch([_rec(f"m{i}", [1.0, 0.1 * i]) for i in range(5)])
    hits = store.search_similar([1.0, 0.0], SearchOptions(limit=2, min_similarity=0.0))
    assert [h.record.source_id for h in hits] == ["m0", "m1"]


def test_namespace_isolation(store):
    store.create(_rec("a1", [1.0, 0.0], namespace="A"))
    store.create(_rec("b1", [1.0, 0.0], namespace="B"))

    hits = store.search_similar([1.0, 0.0], SearchOptions(namespace_id="B"))
    assert [h.record.source_id for h in hits] == ["b1"]

    hits = store.search_similar([1.0, 0.0], SearchOptions(namespace_ids=["A", "C"]))
    assert [h.record.source_id for h in hits] == ["a1"]


def test_filters_are_anded(store):
    store.create(_rec("m", [1.0, 0.0], org="org-1", source_type=SourceType.MESSAGE))
    store.create(_rec("d", [1.0, 0.0], org="org-1", source_type=SourceType.DOCUMENT))
    store.create(_rec("x", [1.0, 0.0], org="org-2", source_type=SourceType.DOCUMENT))

    opts = SearchOptions(org_id="org-1", source_types=["document"])
    assert [h.record.source_id for h in store.search_similar([1.0, 0.0], opts)] == ["d"]

    # empty list means no source_type filter
    opts = SearchOptions(org_id="org-1", source_types=[])
    assert len(store.search_similar([1.0, 0.0], opts)) == 2


def test_ties_break_by_newest_first(store):
    now = datetime.now(timezone.utc)
    store.create(_rec("old", [1.0, 0.0], created_at=now - timedelta(hours=1)))
    store.create(_rec("new", [1.0, 0.0], created_at=now))

    hits = store.search_similar([1.0, 0.0])
    assert [h.record.source_id for h in hits] == ["new", "old"]


def test_records_without_embedding_are_not_candidates(store):
    store.create(_rec("has", [1.0, 0.0]))
    store.create(_rec("none", None))
    hits = store.search_similar([1.0, 0.0], SearchOptions(min_similarity=0.0))
    assert [h.record.source_id for h in hits] == ["has"]


def test_dimension_mismatch_is_rejected(store):
    store.create(_rec("three", [1.0, 0.0, 0.0]))

    with pytest.raises(DimensionMismatchError):
        store.create(_rec("four", [1.0, 0.0, 0.0, 0.0]))
    with pytest.raises(DimensionMismatchError):
        store.search_similar([1.0, 0.0])

    # nothing from the rejected batch was written
    with pytest.raises(DimensionMismatchError):
        store.create_batch([_rec("ok", [0.0, 1.0, 0.0]), _rec("bad", [1.0])])
    assert not store.exists_for_source(SourceType.MESSAGE, "ok")


def test_empty_store_search_returns_nothing(store):
    assert store.search_similar(np.ones(8)) == []


def test_delete_by_source_is_idempotent(store):
    store.create_batch([
        _rec("doc-1", [1.0, 0.0], source_type=SourceType.DOCUMENT, chunk_index=i, chunk_total=3)
        for i in range(3)
    ])

    assert store.delete_by_source("document", "doc-1") == 3
    assert store.delete_by_source("document", "doc-1") == 0
    assert not store.exists_for_source(SourceType.DOCUMENT, "doc-1")


def test_find_by_source_orders_by_chunk_index(store):
    store.create_batch([
        _rec("doc-1", [1.0, 0.0], source_type=SourceType.DOCUMENT, chunk_index=i, chunk_total=3)
        for i in (2, 0, 1)
    ])
    found = store.find_by_source(SourceType.DOCUMENT, "doc-1")
    assert [r.chunk_index for r in found] == [0, 1, 2]


def test_counts_and_namespace_stats(store):
    store.create(_rec("m1", [1.0, 0.0], namespace="A", org="o1"))
    store.create(_rec("m2", [1.0, 0.0], namespace="A", org="o1"))
    store.create(_rec("d1", [1.0, 0.0], namespace="A", org="o2", source_type=SourceType.DOCUMENT))
    store.create(_rec("d2", [1.0, 0.0], namespace="B", org="o2", source_type=SourceType.DOCUMENT))

    assert store.count_by_namespace("A") == 3
    assert store.count_by_org("o2") == 2

    stats = store.get_namespace_stats("A")
    assert stats.total_embeddings == 3
    assert stats.by_source_type == {"message": 2, "document": 1}

    assert store.delete_by_namespace("A") == 3
    assert store.get_namespace_stats("A").total_embeddings == 0


def test_update_metadata_bumps_updated_at(store):
    rec = store.create(_rec("m1", [1.0, 0.0]))
    before = rec.updated_at

    assert store.update_metadata(rec.id, {"pinned": True}) is True
    assert store.find_by_source(SourceType.MESSAGE, "m1")[0].metadata == {"pinned": True}
    assert store.find_by_source(SourceType.MESSAGE, "m1")[0].updated_at >= before
    assert store.update_metadata("missing-id", {}) is False


def test_unknown_source_type_is_a_value_error():
    with pytest.raises(ValueError):
        SearchOptions(source_types=["tweet"])
    with pytest.raises(ValueError):
        InMemoryVectorStore().delete_by_source("tweet", "x")


def test_dimension_survives_emptying_the_store(store):
    store.create(_rec("m1", [1.0, 0.0, 0.0]))
    assert store.delete_by_namespace("room-a") == 1

    with pytest.raises(DimensionMismatchError):
        store.create(_rec("m2", [1.0, 0.0, 0.0, 0.0]))
    store.create(_rec("m3", [0.0, 1.0, 0.0]))
    assert store.dimension == 3
