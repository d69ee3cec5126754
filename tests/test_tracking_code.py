#!/usr/bin/env python3
import os
import sys
import unittest
from unittest import mock

sys.path.insert(0, os.path.dirname(__file__))
from support import make_session_factory

from naapim.app.tracking_code import (
    ALPHABET, CODE_LENGTH, TrackingCodeGenerator, encode_bytes, to_base36,
)
from naapim.app.submission import SessionSubmitter
from naapim.data.models import Result
from naapim.data.result_store import ResultStore


def byte_source(*chunks):
    """random_bytes replacement that hands out the given chunks in order."""
    it = iter(chunks)
    return lambda n: next(it)


class TestEncoding(unittest.TestCase):
    def test_alphabet_has_no_lookalikes(self):
        self.assertEqual(len(ALPHABET), 32)
        self.assertEqual(len(set(ALPHABET)), 32)
        for ch in "01OI":
            self.assertNotIn(ch, ALPHABET)

    def test_every_symbol_equally_likely(self):
        encoded = encode_bytes(bytes(range(256)))
        counts = {ch: encoded.count(ch) for ch in ALPHABET}
        self.assertEqual(set(counts.values()), {8})

    def test_byte_maps_modulo_alphabet(self):
        self.assertEqual(encode_bytes(bytes([0, 31, 32, 255])), "A9A9")

    def test_base36(self):
        self.assertEqual(to_base36(0), "0")
        self.assertEqual(to_base36(35), "Z")
        self.assertEqual(to_base36(36), "10")
        self.assertEqual(to_base36(1700000000000), "LOYW3V28")


class TestTrackingCodeGenerator(unittest.TestCase):
    def test_code_shape(self):
        gen = TrackingCodeGenerator(exists=lambda code: False)
        for _ in range(50):
            code = gen.generate()
            self.assertEqual(len(code), CODE_LENGTH)
            self.assertTrue(all(ch in ALPHABET for ch in code))

    def test_requests_eight_random_bytes(self):
        random_bytes = mock.Mock(return_value=bytes(8))
        TrackingCodeGenerator(exists=lambda code: False, random_bytes=random_bytes).generate()
        random_bytes.assert_called_once_with(8)

    def test_first_free_candidate_is_returned(self):
        first, second = bytes([0] * 8), bytes([1] * 8)
        issued = {"AAAAAAAA"}
        gen = TrackingCodeGenerator(exists=issued.__contains__, random_bytes=byte_source(first, second))
        self.assertEqual(gen.generate(), "BBBBBBBB")

    def test_last_attempt_can_still_succeed(self):
        exists = mock.Mock(side_effect=[True] * 9 + [False])
        chunks = [bytes([i] * 8) for i in range(10)]
        gen = TrackingCodeGenerator(exists=exists, random_bytes=byte_source(*chunks))
        self.assertEqual(gen.generate(), "KKKKKKKK")
        self.assertEqual(exists.call_count, 10)

    def test_exhausted_budget_uses_time_fallback(self):
        exists = mock.Mock(return_value=True)
        gen = TrackingCodeGenerator(exists=exists, clock=lambda: 1700000000.0, max_attempts=10)
        self.assertEqual(gen.generate(), "LOYW3V28")
        self.assertEqual(exists.call_count, 10)

    def test_fallback_is_padded_on_the_left(self):
        gen = TrackingCodeGenerator(exists=lambda code: True, clock=lambda: 0.001, max_attempts=1)
        self.assertEqual(gen.generate(), "XXXXXXX1")

    def test_fallback_keeps_last_eight_digits(self):
        # 3e12 ms is "12A6IJITC" in base 36
        gen = TrackingCodeGenerator(exists=lambda code: True, clock=lambda: 3000000000.0)
        self.assertEqual(gen.fallback(), "2A6IJITC")

    def test_failed_lookup_counts_as_attempt_and_backs_off(self):
        calls = []

        def flaky(code):
            calls.append(code)
            if len(calls) == 1:
                raise RuntimeError("database unavailable")
            return False

        sleep = mock.Mock()
        gen = TrackingCodeGenerator(
            exists=flaky,
            random_bytes=byte_source(bytes([0] * 8), bytes([2] * 8)),
            backoff=0.05,
            sleep=sleep,
        )
        self.assertEqual(gen.generate(), "CCCCCCCC")
        sleep.assert_called_once_with(0.05)

    def test_never_raises_when_lookups_keep_failing(self):
        sleep = mock.Mock()
        gen = TrackingCodeGenerator(
            exists=mock.Mock(side_effect=RuntimeError("down")),
            clock=lambda: 0.001,
            max_attempts=3,
            backoff=0.1,
            sleep=sleep,
        )
        self.assertEqual(gen.generate(), "XXXXXXX1")
        # no sleep after the last attempt
        self.assertEqual([c.args[0] for c in sleep.call_args_list], [0.1, 0.2])


class TestGenerationOnlyReads(unittest.TestCase):
    def setUp(self):
        self.db = make_session_factory()()
        self.issued = SessionSubmitter(self.db).submit("Should I quit my job?", {})["code"]

    def tearDown(self):
        self.db.close()

    def test_store_is_unchanged_by_generation(self):
        gen = TrackingCodeGenerator(exists=ResultStore(self.db).code_exists)
        for _ in range(5):
            self.assertNotEqual(gen.generate(), self.issued)

        self.assertEqual(self.db.query(Result).count(), 1)
        self.assertEqual(len(self.db.new), 0)
        self.assertEqual(len(self.db.dirty), 0)
        self.assertEqual(self.db.query(Result).one().tracking_code, self.issued)

    def test_only_the_lookup_is_used(self):
        store = mock.Mock(spec=ResultStore)
        store.code_exists.return_value = False
        TrackingCodeGenerator(exists=store.code_exists).generate()

        store.code_exists.assert_called_once()
        store.create_result.assert_not_called()
        store.save_analysis.assert_not_called()


if __name__ == "__main__":
    unittest.main()
