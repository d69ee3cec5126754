#!/usr/bin/env python3
import os
import sys
import unittest
from unittest import mock

sys.path.insert(0, os.path.dirname(__file__))
from support import make_session_factory

from naapim.app.outcomes import OutcomeService
from naapim.app.submission import SessionSubmitter
from naapim.data.models import Outcome, OutcomeType, Feeling, QuestionFeedback, FeedbackValue


class TestSaveOutcome(unittest.TestCase):
    def setUp(self):
        self.db = make_session_factory()()
        self.session_id = SessionSubmitter(self.db).submit(
            "Should I start tennis?", {}, archetype_id="health_wellness"
        )["session_id"]

    def tearDown(self):
        self.db.close()

    def test_outcome_takes_context_from_session(self):
        out = OutcomeService(self.db).save_outcome(self.session_id, "decided", "I signed up", "happy")
        self.assertTrue(out["success"])
        self.assertEqual(out["message"], "Outcome saved successfully")

        outcome = self.db.get(Outcome, out["outcome_id"])
        self.assertEqual(outcome.outcome_type, OutcomeType.decided)
        self.assertEqual(outcome.feeling, Feeling.happy)
        self.assertEqual(outcome.archetype_id, "health_wellness")
        self.assertEqual(outcome.related_question, "Should I start tennis?")
        self.assertFalse(outcome.is_generated)
        self.assertIsNone(outcome.embedding)

    def test_invalid_values_are_rejected(self):
        service = OutcomeService(self.db)
        with self.assertRaisesRegex(ValueError, "Invalid outcome_type"):
            service.save_outcome(self.session_id, "maybe")
        with self.assertRaisesRegex(ValueError, "Invalid feeling"):
            service.save_outcome(self.session_id, "decided", "text", "ecstatic")
        with self.assertRaises(ValueError):
            service.save_outcome(None, "decided")
        self.assertEqual(self.db.query(Outcome).count(), 0)

    def test_text_is_embedded_with_question(self):
        embedder = mock.Mock()
        embedder.generate_embedding.return_value = [0.1, 0.2, 0.3]
        out = OutcomeService(self.db, embedder).save_outcome(self.session_id, "decided", "Loved it", "happy")
        embedder.generate_embedding.assert_called_once_with("Should I start tennis? | Loved it")
        self.assertEqual(self.db.get(Outcome, out["outcome_id"]).embedding, [0.1, 0.2, 0.3])

    def test_embedding_failure_still_saves(self):
        embedder = mock.Mock()
        embedder.generate_embedding.side_effect = RuntimeError("model missing")
        out = OutcomeService(self.db, embedder).save_outcome(self.session_id, "thinking", "Not sure yet")
        self.assertIsNone(self.db.get(Outcome, out["outcome_id"]).embedding)

    def test_unknown_session_still_saves(self):
        out = OutcomeService(self.db).save_outcome("ghost", "cancelled", archetype_id="lifestyle_change")
        outcome = self.db.get(Outcome, out["outcome_id"])
        self.assertEqual(outcome.archetype_id, "lifestyle_change")
        self.assertIsNone(outcome.related_question)


class TestQuestionFeedback(unittest.TestCase):
    def setUp(self):
        self.db = make_session_factory()()
        self.service = OutcomeService(self.db)

    def tearDown(self):
        self.db.close()

    def test_feedback_is_upserted_per_session_and_field(self):
        self.service.save_question_feedback("s1", "career_decisions", "urgency", "helpful")
        self.service.save_question_feedback("s1", "career_decisions", "urgency", "not_helpful")
        rows = self.db.query(QuestionFeedback).all()
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0].feedback, FeedbackValue.not_helpful)

    def test_anonymous_feedback_is_always_inserted(self):
        self.service.save_question_feedback(None, "career_decisions", "urgency", "helpful")
        self.service.save_question_feedback(None, "career_decisions", "urgency", "helpful")
        self.assertEqual(self.db.query(QuestionFeedback).count(), 2)

    def test_invalid_feedback(self):
        with self.assertRaisesRegex(ValueError, "Invalid feedback"):
            self.service.save_question_feedback("s1", "career_decisions", "urgency", "meh")
        with self.assertRaises(ValueError):
            self.service.save_question_feedback("s1", "career_decisions", "", "helpful")


if __name__ == "__main__":
    unittest.main()
