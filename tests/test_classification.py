import unittest
from unittest.mock import MagicMock
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from event_catalog.services.classification import STANDARD_CATEGORIES, CategoryClassifier


class TestCategoryClassifier(unittest.TestCase):

    def setUp(self):
        self.classifier = CategoryClassifier()

    def test_standard_category_is_kept(self):
        event = {"title": "Jazz Night", "category": "Arts & Culture"}
        self.assertEqual(self.classifier.classify(event), "Arts & Culture")

    def test_is_standard(self):
        self.assertTrue(CategoryClassifier.is_standard("festivals"))
        self.assertTrue(CategoryClassifier.is_standard("Family & Kids Weekend"))
        self.assertFalse(CategoryClassifier.is_standard("Events"))
        self.assertFalse(CategoryClassifier.is_standard(None))
        self.assertFalse(CategoryClassifier.is_standard(""))

    def test_keyword_rules(self):
        cases = {
            "Jazz Night": "Music & Concerts",
            "Modern Gallery Opening": "Arts & Culture",
            "Sunrise Yoga": "Sports & Fitness",
            "Chef's Table": "Food & Dining",
            "Doha Food Festival": "Food & Dining",
            "Winter Carnival": "Festivals",
        }
        for title, expected in cases.items():
            with self.subTest(title=title):
                self.assertEqual(self.classifier.classify({"title": title, "category": "Events"}), expected)

    def test_unmatched_keeps_original_or_other(self):
        self.assertEqual(self.classifier.classify({"title": "Mystery", "category": "Misc"}), "Misc")
        self.assertEqual(self.classifier.classify({"title": "Mystery"}), "Other")

    def test_llm_answer_is_mapped_to_standard_category(self):
        generate = MagicMock(return_value="  Festivals\n")
        classifier = CategoryClassifier(generate=generate, delay_seconds=0)

        self.assertEqual(classifier.classify({"title": "Jazz Night", "category": "Events"}), "Festivals")
        prompt = generate.call_args[0][0]
        self.assertIn("Title: Jazz Night", prompt)
        self.assertIn("Original Category: Events", prompt)

    def test_unrecognised_llm_answer_falls_back_to_rules(self):
        classifier = CategoryClassifier(generate=MagicMock(return_value="Astronomy"), delay_seconds=0)
        self.assertEqual(classifier.classify({"title": "Jazz Night"}), "Music & Concerts")

    def test_llm_failure_falls_back_to_rules(self):
        classifier = CategoryClassifier(generate=MagicMock(side_effect=RuntimeError("timeout")), delay_seconds=0)
        self.assertEqual(classifier.classify({"title": "Jazz Night"}), "Music & Concerts")

    def test_classify_batch_copies_and_annotates(self):
        events = [{"title": "Jazz Night", "category": "Events"}, None]

        results = self.classifier.classify_batch(events)

        self.assertEqual(results[0]["category"], "Music & Concerts")
        self.assertEqual(results[0]["original_category"], "Events")
        self.assertIsNone(results[1])
        self.assertEqual(events[0]["category"], "Events")

    def test_classify_batch_throttles_llm_calls(self):
        sleep = MagicMock()
        classifier = CategoryClassifier(generate=MagicMock(return_value="Other"), delay_seconds=0.2, sleep=sleep)

        classifier.classify_batch([{"title": "A"}, {"title": "B"}])

        self.assertEqual(sleep.call_count, 2)

    def test_taxonomy(self):
        self.assertEqual(len(STANDARD_CATEGORIES), 13)
        self.assertIn("Other", STANDARD_CATEGORIES)


if __name__ == '__main__':
    unittest.main()
