#!/usr/bin/python3
#
# ibus-lipi - A dictionary based transliteration input method for IBus
#
# Copyright (c) 2024 The ibus-lipi authors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>

'''
This file implements test cases for word suggestions and sentence matching
'''

import sys
import logging
import unittest

import testutils # pylint: disable=import-error
from testutils import entry

sys.path.insert(0, testutils.ENGINE_DIR)
# pylint: disable=import-error
# pylint: disable=wrong-import-position
import lipi_suggest
from lipi_dictionary import CandidateEntry, CandidateKind, Index
from lipi_suggest import Suggestion, suggest_sentence, suggest_word
# pylint: enable=wrong-import-position
# pylint: enable=import-error
sys.path.pop(0)

LOGGER = logging.getLogger('ibus-lipi')

# pylint: disable=missing-function-docstring
# pylint: disable=missing-class-docstring

class SuggestWordTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.index = testutils.sample_index()

    def tearDown(self) -> None:
        pass

    def test_longest_prefix_first(self) -> None:
        suggestions = suggest_word(self.index, 'janx')
        self.assertEqual(
            [(suggestion.output, suggestion.boundaries)
             for suggestion in suggestions],
            [('J', (3,)), ('j1', (3,)), ('j2', (3,)), ('K', (2,)), ('J', (1,))])

    def test_cap_truncates_inside_an_entry(self) -> None:
        suggestions = suggest_word(self.index, 'jan', limit=2)
        self.assertEqual(
            [suggestion.output for suggestion in suggestions], ['J', 'j1'])
        self.assertEqual(suggest_word(self.index, 'jan', limit=0), [])

    def test_default_cap(self) -> None:
        index = Index.build([
            entry('kal', 'A', 'B', 'C', 'D'),
            entry('ka', 'E', 'F'),
            entry('k', 'G')])
        suggestions = suggest_word(index, 'kal')
        self.assertEqual(len(suggestions), lipi_suggest.CANDIDATE_CAP)
        self.assertEqual(
            [suggestion.output for suggestion in suggestions],
            ['A', 'B', 'C', 'D', 'E'])

    def test_no_match(self) -> None:
        self.assertEqual(suggest_word(self.index, 'xyz'), [])
        self.assertEqual(suggest_word(self.index, ''), [])

    def test_prefix_of_spelling_only(self) -> None:
        suggestions = suggest_word(self.index, 'se')
        self.assertEqual(suggestions, [Suggestion('C', (2,)), Suggestion('C', (1,))])

    def test_suggestions_consume_a_prefix(self) -> None:
        for spelling in ('lilonsewi', 'janx', 'lonx', 'o`x', 'sewili'):
            for suggestion in suggest_word(self.index, spelling):
                self.assertEqual(len(suggestion.boundaries), 1)
                self.assertGreater(suggestion.end, 0)
                self.assertLessEqual(suggestion.end, len(spelling))
                self.assertIsNotNone(
                    self.index.lookup(spelling[:suggestion.end]))

class SuggestSentenceTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.index = testutils.sample_index()

    def tearDown(self) -> None:
        pass

    def test_three_words(self) -> None:
        self.assertEqual(
            suggest_sentence(self.index, 'lilonsewi'),
            Suggestion('ABC', (2, 5, 9)))

    def test_needs_two_words(self) -> None:
        self.assertIsNone(suggest_sentence(self.index, 'lon'))
        self.assertIsNone(suggest_sentence(self.index, 'li'))
        self.assertIsNone(suggest_sentence(self.index, ''))
        self.assertEqual(
            suggest_sentence(self.index, 'lili'), Suggestion('AA', (2, 4)))

    def test_no_complete_decomposition(self) -> None:
        self.assertIsNone(suggest_sentence(self.index, 'lix'))
        self.assertIsNone(suggest_sentence(self.index, 'xli'))

    def test_incomplete_words_count(self) -> None:
        # “lo” is only the prefix of “lon”:
        self.assertEqual(
            suggest_sentence(self.index, 'lilo'), Suggestion('AB', (2, 4)))

    def test_first_fit_prefers_longer_prefix(self) -> None:
        index = Index.build([
            entry('ab', 'X'),
            entry('abc', 'Y'),
            entry('cd', 'Z'),
            entry('d', 'W')])
        # “ab” + “cd” would work as well:
        self.assertEqual(
            suggest_sentence(index, 'abcd'), Suggestion('YW', (3, 4)))

    def test_backtracking(self) -> None:
        index = Index.build([
            entry('abc', 'Y'),
            entry('ab', 'X'),
            entry('cde', 'Z')])
        # “abc” leaves “de” which cannot be matched:
        self.assertEqual(
            suggest_sentence(index, 'abcde'), Suggestion('XZ', (2, 5)))

    def test_uses_first_word_of_entry(self) -> None:
        self.assertEqual(
            suggest_sentence(self.index, 'janli'), Suggestion('JA', (3, 5)))

    def test_boundaries_cover_the_spelling(self) -> None:
        for spelling in ('lilonsewi', 'lili', 'sewijan', 'o`li', 'lonlilon'):
            suggestion = suggest_sentence(self.index, spelling)
            assert suggestion is not None
            self.assertGreaterEqual(len(suggestion.boundaries), 2)
            self.assertEqual(suggestion.end, len(spelling))
            self.assertEqual(
                list(suggestion.boundaries), sorted(set(suggestion.boundaries)))

    def test_long_spelling_without_decomposition(self) -> None:
        index = Index.build([entry('a', 'A'), entry('aa', 'B')])
        self.assertIsNone(suggest_sentence(index, 'a' * 60 + 'x'))

    def test_many_words(self) -> None:
        index = Index.build([entry('a', 'X'), entry('ab', 'Y')])
        suggestion = suggest_sentence(index, 'a' * 3000 + 'ab')
        assert suggestion is not None
        self.assertEqual(suggestion.output, 'X' * 3000 + 'Y')
        self.assertEqual(len(suggestion.boundaries), 3001)
        self.assertEqual(suggestion.end, 3002)
        self.assertIsNone(suggest_sentence(index, 'a' * 3000 + 'b'))

    def test_step_score(self) -> None:
        # pylint: disable=protected-access
        self.assertEqual(lipi_suggest._step_score(
            CandidateEntry(CandidateKind.UNIQUE, ('B',)), 3), 60)
        self.assertEqual(lipi_suggest._step_score(
            CandidateEntry(CandidateKind.EXACT, ('B',)), 3), 25)
        self.assertEqual(lipi_suggest._step_score(
            CandidateEntry(CandidateKind.DUPLICATES, ('A', 'B')), 1), 15)
        # pylint: enable=protected-access

if __name__ == '__main__':
    unittest.main()
