#!/usr/bin/env python3
import os
import sys
import unittest
from unittest import mock

sys.path.insert(0, os.path.dirname(__file__))
from support import make_registry

from naapim.app.analysis import AnalysisGenerator
from naapim.app.generate import GenerationError, extract_json
from naapim.app.postprocess import Postprocessor


class TestExtractJson(unittest.TestCase):
    def test_plain_and_wrapped(self):
        self.assertEqual(extract_json('{"a": 1}'), {"a": 1})
        self.assertEqual(extract_json('Sure! ```json\n{"a": 1}\n``` done'), {"a": 1})

    def test_unusable(self):
        self.assertIsNone(extract_json(""))
        self.assertIsNone(extract_json("no json here"))
        self.assertIsNone(extract_json("[1, 2]"))


class TestPostprocessor(unittest.TestCase):
    def setUp(self):
        self.post = Postprocessor()

    def test_values_are_brought_into_range(self):
        analysis = self.post.process_analysis({
            "title": " Go for it ",
            "recommendation": "Do it.",
            "steps": ["1", "2", "3", "4", "5", "6", ""],
            "sentiment": "Ecstatic",
            "decision_score": 140,
            "timing_recommendation": "someday",
            "suggestion_type": "car",
        })
        self.assertEqual(analysis["title"], "Go for it")
        self.assertEqual(analysis["steps"], ["1", "2", "3", "4", "5"])
        self.assertEqual(analysis["sentiment"], "neutral")
        self.assertEqual(analysis["decision_score"], 100)
        self.assertIsNone(analysis["timing_recommendation"])
        self.assertEqual(analysis["suggestion_type"], "other")
        self.assertEqual(analysis["alternatives"], [])

    def test_ranked_options_sorted_and_capped(self):
        options = [{"name": f"o{i}", "fit_score": i * 10} for i in range(7)] + [{"fit_score": 99}]
        ranked = self.post.format_ranked_options(options)
        self.assertEqual([o["name"] for o in ranked], ["o6", "o5", "o4", "o3", "o2"])

    def test_known_values_kept(self):
        analysis = self.post.process_analysis({
            "sentiment": "cautious",
            "decision_score": "-5",
            "timing_recommendation": "3_months",
            "alternatives": [{"name": "Wait", "description": "Save first"}, {"description": "nameless"}],
        })
        self.assertEqual(analysis["sentiment"], "cautious")
        self.assertEqual(analysis["decision_score"], 0)
        self.assertEqual(analysis["timing_recommendation"], "3_months")
        self.assertEqual(analysis["alternatives"], [{"name": "Wait", "description": "Save first"}])


class TestAnalysisGenerator(unittest.TestCase):
    def setUp(self):
        self.registry = make_registry()
        self.client = mock.Mock()

    def test_context_uses_readable_answers(self):
        self.client.generate_json.return_value = {
            "title": "Join the club",
            "recommendation": "Start this month.",
            "sentiment": "positive",
            "decision_score": 80,
        }
        analysis = AnalysisGenerator(self.registry, self.client).generate(
            "Should I start tennis?", {"s0": "yes", "s2": "no"}, "health_wellness"
        )
        self.assertEqual(analysis["title"], "Join the club")
        self.assertEqual(analysis["decision_score"], 80)

        prompt = self.client.generate_json.call_args.args[0]
        self.assertIn("- Question s0: Yes", prompt)
        self.assertIn("- Question s2: No", prompt)
        self.assertIn("Health and fitness", prompt)
        self.assertEqual(self.client.generate_json.call_args.kwargs["temperature"], 0.7)

    def test_failure_gives_placeholder(self):
        self.client.generate_json.side_effect = GenerationError("timeout")
        analysis = AnalysisGenerator(self.registry, self.client).generate("Start tennis?", {}, "health_wellness")
        self.assertEqual(analysis["sentiment"], "neutral")
        self.assertTrue(analysis["title"])

    def test_empty_model_reply_gives_placeholder(self):
        self.client.generate_json.return_value = {"sentiment": "positive"}
        analysis = AnalysisGenerator(self.registry, self.client).generate("Start tennis?", {}, "health_wellness")
        self.assertEqual(analysis["sentiment"], "neutral")

    def test_blank_question(self):
        with self.assertRaises(ValueError):
            AnalysisGenerator(self.registry, self.client).generate("", {}, "health_wellness")


if __name__ == "__main__":
    unittest.main()
