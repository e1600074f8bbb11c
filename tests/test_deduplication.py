import unittest
from datetime import datetime, timezone
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from event_catalog.models import Event
from event_catalog.services.deduplication import Deduplicator, word_overlap_similarity
from event_catalog.utils.text_cleaning import normalize_title


def make_event(title, day=5, source="X", hour=18):
    return Event(
        id=f"{source}-{title}",
        title=title,
        start_date=datetime(2026, 11, day, hour, 0, tzinfo=timezone.utc),
        source=source,
    )


class TestNormalizeTitle(unittest.TestCase):

    def test_lowercases_and_strips_punctuation(self):
        self.assertEqual(normalize_title("  ART FAIR!! "), "art fair")

    def test_removes_stop_words(self):
        self.assertEqual(normalize_title("The Art Fair at the Park"), "art fair   park")

    def test_inner_stop_word_leaves_separators(self):
        self.assertEqual(normalize_title("Jazz at Night"), "jazz  night")

    def test_stop_words_inside_words_are_kept(self):
        self.assertEqual(normalize_title("Theatre Anthem"), "theatre anthem")


class TestWordOverlapSimilarity(unittest.TestCase):

    def test_reordered_title_scores_high(self):
        score = word_overlap_similarity("qatar national day parade", "national day parade qatar")
        self.assertAlmostEqual(score, 22 / 25)

    def test_short_words_do_not_count(self):
        self.assertEqual(word_overlap_similarity("go to it", "go to it now"), 0.0)

    def test_both_empty(self):
        self.assertEqual(word_overlap_similarity("", ""), 1.0)

    def test_removed_stop_word_counts_towards_length(self):
        score = word_overlap_similarity("jazz night", normalize_title("Jazz at Night"))
        self.assertAlmostEqual(score, 9 / 11)


class TestDeduplicator(unittest.TestCase):

    def setUp(self):
        self.deduplicator = Deduplicator()

    def test_identical_normalized_titles_collapse_first_wins(self):
        first = make_event("Art Fair", source="X")
        second = make_event("ART FAIR", source="Y")

        result = self.deduplicator.dedupe([first, second])

        self.assertEqual(result, [first])

    def test_insertion_order_decides_survivor(self):
        first = make_event("ART FAIR", source="Y")
        second = make_event("Art Fair", source="X")

        result = self.deduplicator.dedupe([first, second])

        self.assertEqual([event.source for event in result], ["Y"])

    def test_same_title_on_different_days_is_kept(self):
        events = [make_event("Yoga Class", day=5), make_event("Yoga Class", day=6)]
        self.assertEqual(len(self.deduplicator.dedupe(events)), 2)

    def test_same_day_different_times_collapse(self):
        events = [make_event("Art Fair", hour=10), make_event("Art Fair", hour=19, source="Y")]
        self.assertEqual(len(self.deduplicator.dedupe(events)), 1)

    def test_substring_titles_collapse(self):
        events = [make_event("Doha Food Festival 2025"), make_event("Doha Food Festival", source="Y")]
        result = self.deduplicator.dedupe(events)
        self.assertEqual([event.title for event in result], ["Doha Food Festival 2025"])

    def test_unrelated_titles_are_kept(self):
        events = [make_event("Jazz Night"), make_event("Yoga Class", source="Y")]
        self.assertEqual(len(self.deduplicator.dedupe(events)), 2)

    def test_high_overlap_collapses(self):
        events = [
            make_event("Qatar National Day Parade"),
            make_event("National Day Parade Qatar", source="Y"),
        ]
        self.assertEqual(len(self.deduplicator.dedupe(events)), 1)

    def test_scorer_is_replaceable(self):
        deduplicator = Deduplicator(scorer=lambda a, b: 0.0)
        events = [
            make_event("Qatar National Day Parade"),
            make_event("National Day Parade Qatar", source="Y"),
        ]
        self.assertEqual(len(deduplicator.dedupe(events)), 2)

    def test_order_is_preserved(self):
        events = [make_event("Jazz Night"), make_event("Yoga Class"), make_event("Art Fair")]
        self.assertEqual(self.deduplicator.dedupe(events), events)

    def test_dedupe_is_idempotent(self):
        events = [
            make_event("Art Fair"),
            make_event("ART FAIR", source="Y"),
            make_event("Doha Food Festival 2025"),
            make_event("Doha Food Festival", source="Y"),
            make_event("Jazz Night", day=6),
            make_event("Yoga Class", day=6),
        ]
        once = self.deduplicator.dedupe(events)
        self.assertEqual(self.deduplicator.dedupe(once), once)

    def test_works_on_filtered_subset(self):
        events = [make_event("Art Fair", day=5), make_event("Art Fair", day=5, source="Y"), make_event("Art Fair", day=9)]
        subset = [event for event in events if event.start_date.day == 5]
        self.assertEqual(len(self.deduplicator.dedupe(subset)), 1)

    def test_is_duplicate(self):
        self.assertTrue(self.deduplicator.is_duplicate(make_event("Art Fair"), make_event("The Art Fair", source="Y")))
        self.assertFalse(self.deduplicator.is_duplicate(make_event("Art Fair", day=5), make_event("Art Fair", day=6)))

    def test_inner_stop_word_titles_collapse_by_score(self):
        events = [make_event("Jazz at Night"), make_event("Jazz Night", source="Y")]
        self.assertTrue(self.deduplicator.titles_match("jazz  night", "jazz night"))
        self.assertEqual(len(self.deduplicator.dedupe(events)), 1)
        strict = Deduplicator(threshold=0.9)
        self.assertEqual(len(strict.dedupe(events)), 2)

    def test_empty_input(self):
        self.assertEqual(self.deduplicator.dedupe([]), [])


if __name__ == '__main__':
    unittest.main()
