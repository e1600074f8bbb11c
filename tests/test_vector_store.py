import unittest
from unittest.mock import MagicMock
from datetime import datetime, timezone
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import numpy as np

from event_catalog.exceptions import PersistenceError, VectorDimensionError
from event_catalog.models import EmbeddingRecord, Event
from event_catalog.services.vector_store import VectorStore, cosine_similarity


def make_event(event_id, title, price="Free"):
    return Event(
        id=event_id,
        title=title,
        start_date=datetime(2026, 11, 5, tzinfo=timezone.utc),
        source="X",
        price=price,
    )


class TestCosineSimilarity(unittest.TestCase):

    def test_identical_vectors(self):
        self.assertEqual(cosine_similarity([0.3, -1.2, 4.0], [0.3, -1.2, 4.0]), 1.0)

    def test_identical_embeddings_score_exactly_one(self):
        rng = np.random.default_rng(7)
        for vector in rng.normal(size=(200, 64)):
            self.assertEqual(cosine_similarity(vector.tolist(), list(vector)), 1.0)

    def test_scores_stay_within_bounds(self):
        rng = np.random.default_rng(11)
        for vector in rng.normal(size=(200, 64)):
            self.assertLessEqual(cosine_similarity(vector, vector * 3.0), 1.0)
            self.assertGreaterEqual(cosine_similarity(vector, -vector), -1.0)

    def test_orthogonal_vectors(self):
        self.assertAlmostEqual(cosine_similarity([1.0, 0.0], [0.0, 1.0]), 0.0)

    def test_opposite_vectors(self):
        self.assertAlmostEqual(cosine_similarity([1.0, 2.0], [-1.0, -2.0]), -1.0)

    def test_zero_vector_scores_zero(self):
        self.assertEqual(cosine_similarity([0.0, 0.0], [1.0, 2.0]), 0.0)
        self.assertEqual(cosine_similarity([1.0, 2.0], [0.0, 0.0]), 0.0)

    def test_dimension_mismatch_raises(self):
        with self.assertRaises(VectorDimensionError):
            cosine_similarity([1.0, 2.0], [1.0, 2.0, 3.0])


class TestInMemoryVectorStore(unittest.TestCase):

    def setUp(self):
        self.store = VectorStore(model="test-model")
        self.events = [
            make_event("a", "Jazz Night"),
            make_event("b", "Yoga Class"),
            make_event("c", "Art Fair"),
        ]
        self.vectors = [[1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.7, 0.7, 0.0]]

    def test_search_empty_store(self):
        self.assertEqual(self.store.search([1.0, 0.0, 0.0], 5), [])

    def test_bulk_upsert_and_search_ranking(self):
        self.store.bulk_upsert(self.events, self.vectors)

        results = self.store.search([1.0, 0.1, 0.0], k=2)

        self.assertEqual([result.event_id for result in results], ["a", "c"])
        self.assertGreater(results[0].score, results[1].score)
        self.assertEqual(results[0].metadata["title"], "Jazz Night")

    def test_ties_keep_insertion_order(self):
        self.store.bulk_upsert(self.events[:2], [[1.0, 1.0, 0.0], [1.0, 1.0, 0.0]])
        results = self.store.search([1.0, 1.0, 0.0], k=2)
        self.assertEqual([result.event_id for result in results], ["a", "b"])

    def test_live_metadata_overrides_index_time_metadata(self):
        self.store.bulk_upsert(self.events, self.vectors)
        updated = make_event("a", "Jazz Night", price="QAR 150")

        results = self.store.search([1.0, 0.0, 0.0], k=1, current_metadata=[updated])

        self.assertEqual(results[0].metadata["price"], "QAR 150")

    def test_stale_embeddings_are_skipped(self):
        self.store.bulk_upsert(self.events, self.vectors)

        results = self.store.search([1.0, 0.0, 0.0], k=3, current_metadata={"b": self.events[1]})

        self.assertEqual([result.event_id for result in results], ["b"])

    def test_upsert_has_size(self):
        self.store.upsert("z", [0.5, 0.5, 0.5])

        self.assertTrue(self.store.has("z"))
        self.assertFalse(self.store.has("missing"))
        self.assertEqual(self.store.size(), 1)
        self.assertEqual(self.store.search([0.5, 0.5, 0.5], 1)[0].metadata, {"id": "z"})

    def test_clear(self):
        self.store.bulk_upsert(self.events, self.vectors)
        self.store.clear()
        self.assertEqual(self.store.size(), 0)
        self.assertEqual(self.store.search([1.0, 0.0, 0.0]), [])

    def test_retain_prunes_stale_records(self):
        self.store.bulk_upsert(self.events, self.vectors)

        pruned = self.store.retain({"a", "c"})

        self.assertEqual(pruned, 1)
        self.assertFalse(self.store.has("b"))
        self.assertEqual(self.store.retain({"a", "c"}), 0)

    def test_mismatched_lengths_rejected(self):
        with self.assertRaises(ValueError):
            self.store.bulk_upsert(self.events, self.vectors[:2])

    def test_query_dimension_mismatch_raises(self):
        self.store.bulk_upsert(self.events, self.vectors)
        with self.assertRaises(VectorDimensionError):
            self.store.search([1.0, 0.0], 3)

    def test_search_snapshot_is_not_mutated_by_writes(self):
        self.store.bulk_upsert(self.events[:1], self.vectors[:1])
        snapshot = self.store._cache
        self.store.upsert("b", [0.0, 1.0, 0.0])
        self.assertEqual(list(snapshot), ["a"])
        self.assertEqual(self.store.size(), 2)


class TestPersistentVectorStore(unittest.TestCase):

    def setUp(self):
        self.repository = MagicMock()
        self.repository.find_all.return_value = []
        self.store = VectorStore(repository=self.repository, model="test-model")
        self.events = [make_event("a", "Jazz Night"), make_event("b", "Yoga Class")]
        self.vectors = [[1.0, 0.0], [0.0, 1.0]]

    def test_initialize_loads_cache(self):
        self.repository.find_all.return_value = [
            EmbeddingRecord(event_id="a", vector=(1.0, 0.0), model="test-model"),
        ]

        self.store.initialize()

        self.assertTrue(self.store.has("a"))
        self.assertEqual(self.store.size(), 1)

    def test_initialize_failure_keeps_empty_cache(self):
        self.repository.find_all.side_effect = PersistenceError("down")
        self.store.initialize()
        self.assertEqual(self.store.size(), 0)

    def test_bulk_upsert_writes_then_refreshes(self):
        self.repository.find_all.return_value = [
            EmbeddingRecord(event_id="a", vector=(1.0, 0.0), model="test-model"),
            EmbeddingRecord(event_id="b", vector=(0.0, 1.0), model="test-model"),
        ]

        self.store.bulk_upsert(self.events, self.vectors)

        records = self.repository.bulk_upsert.call_args[0][0]
        self.assertEqual([record.event_id for record in records], ["a", "b"])
        self.repository.find_all.assert_called_once()
        self.assertEqual(self.store.size(), 2)
        # index-time metadata survives the refresh
        self.assertEqual(self.store.search([1.0, 0.0], 1)[0].metadata["title"], "Jazz Night")

    def test_bulk_write_failure_still_updates_memory(self):
        self.repository.bulk_upsert.side_effect = PersistenceError("down")

        self.store.bulk_upsert(self.events, self.vectors)

        self.assertEqual(self.store.size(), 2)
        self.repository.find_all.assert_not_called()

    def test_refresh_failure_keeps_local_view(self):
        self.repository.find_all.side_effect = PersistenceError("down")
        self.store.bulk_upsert(self.events, self.vectors)
        self.assertEqual(self.store.size(), 2)

    def test_single_upsert_failure_still_updates_memory(self):
        self.repository.upsert.side_effect = PersistenceError("down")
        self.store.upsert("a", [1.0, 0.0])
        self.assertTrue(self.store.has("a"))

    def test_retain_deletes_persisted_records(self):
        self.repository.bulk_upsert.side_effect = PersistenceError("down")
        self.store.bulk_upsert(self.events, self.vectors)

        self.store.retain({"a"})

        self.repository.delete_except.assert_called_once_with({"a"})

    def test_clear_deletes_persisted_records(self):
        self.store.clear()
        self.repository.delete_all.assert_called_once()


if __name__ == '__main__':
    unittest.main()
