"""
Fuzzy module behavioral tests (edit distance and suggestions).

Scope
- Validate the Levenshtein distance on classic pairs and edge cases.
- Validate suggestion threshold (3), tie-breaking and empty candidates.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from arbor.fuzzy import THRESHOLD, distance, suggest


class TestDistance(TestCase):
    """Levenshtein distance."""

    def testIdenticalStrings(self):
        self.assertEqual(distance("play", "play"), 0)

    def testEmptyStrings(self):
        self.assertEqual(distance("", ""), 0)
        self.assertEqual(distance("", "seek"), 4)
        self.assertEqual(distance("stop", ""), 4)

    def testClassicPairs(self):
        self.assertEqual(distance("kitten", "sitting"), 3)
        self.assertEqual(distance("flaw", "lawn"), 2)
        self.assertEqual(distance("hots", "host"), 2)

    def testSymmetric(self):
        self.assertEqual(distance("setvolume", "setspeed"), distance("setspeed", "setvolume"))

    def testRejectsNonStrings(self):
        with self.assertRaises(TypeError):
            distance("host", None)


class TestSuggest(TestCase):
    """Closest-candidate suggestion."""

    def testThresholdIsThree(self):
        self.assertEqual(THRESHOLD, 3)

    def testClosestCandidateWins(self):
        self.assertEqual(suggest("hots", ["port", "host", "connection_type"]), "host")

    def testDistanceThreeIsSuggested(self):
        self.assertEqual(suggest("abcxyz", ["abc"]), "abc")

    def testDistanceFourIsNotSuggested(self):
        self.assertIsNone(suggest("abcwxyz", ["abc"]))

    def testTiesKeepFirstEncountered(self):
        self.assertEqual(suggest("pat", ["put", "pet", "pit"]), "put")

    def testNoCandidates(self):
        self.assertIsNone(suggest("play", []))

    def testCustomThreshold(self):
        self.assertIsNone(suggest("paly", ["play"], threshold=1))
        self.assertEqual(suggest("paly", ["play"], threshold=2), "play")

    def testRejectsStringCandidates(self):
        with self.assertRaises(TypeError):
            suggest("play", "play")


if __name__ == "__main__":
    unittest.main()
