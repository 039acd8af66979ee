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
This file implements test cases for the composition state machine
'''

from typing import Optional
import sys
import logging
import threading
import unittest

import testutils # pylint: disable=import-error
from testutils import entry, candidate_outputs

sys.path.insert(0, testutils.ENGINE_DIR)
# pylint: disable=import-error
# pylint: disable=wrong-import-position
from lipi_dictionary import Index
from lipi_composition import Composer, ComposerConfig, Effects, Event
# pylint: enable=wrong-import-position
# pylint: enable=import-error
sys.path.pop(0)

LOGGER = logging.getLogger('ibus-lipi')

# pylint: disable=missing-function-docstring
# pylint: disable=missing-class-docstring

class ComposerTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.index = testutils.sample_index()
        self.composer = Composer(self.index)

    def tearDown(self) -> None:
        pass

    def process(self, event: Event, composer: Optional[Composer] = None) -> Effects:
        if composer is None:
            composer = self.composer
        effects = composer.process_event(event)
        assert effects is not None
        return effects

    def type_string(
            self, text: str, composer: Optional[Composer] = None) -> Effects:
        effects = Effects()
        for char in text:
            if char.isalpha():
                effects = self.process(Event.letter(char), composer)
            else:
                effects = self.process(Event.punct(char), composer)
        return effects

    def test_idle_letter_opens_composition(self) -> None:
        self.assertFalse(self.composer.is_composing())
        effects = self.process(Event.letter('l'))
        self.assertTrue(effects.consumed)
        self.assertTrue(effects.updated)
        self.assertFalse(effects.ended)
        self.assertIsNone(effects.commit_text)
        self.assertEqual(effects.display_text, 'l')
        self.assertEqual(effects.word_boundaries, (1,))
        self.assertEqual(effects.candidates, [(0, 'A'), (1, 'B')])
        self.assertTrue(self.composer.is_composing())
        self.assertEqual(self.composer.get_spelling(), 'l')

    def test_idle_other_events_are_not_consumed(self) -> None:
        for event in (Event.space(), Event.backspace(), Event.enter(),
                      Event.number_key(1), Event.punct('.'),
                      Event.disable(), Event.focus_lost(),
                      Event.letter('ক'), Event.letter('1')):
            effects = self.process(event)
            self.assertFalse(effects.consumed, str(event))
            self.assertIsNone(effects.commit_text)
            self.assertFalse(self.composer.is_composing())

    def test_scenario_sentence_confirmed(self) -> None:
        effects = self.type_string('lilonsewi')
        self.assertEqual(effects.candidates[0], (0, 'ABC'))
        self.assertEqual(effects.word_boundaries, (2, 5, 9))
        self.assertEqual(self.composer.get_suggestions()[0].boundaries,
                         (2, 5, 9))
        effects = self.process(Event.space())
        self.assertEqual(effects.commit_text, 'ABC')
        self.assertTrue(effects.ended)
        self.assertFalse(self.composer.is_composing())

    def test_scenario_enter_releases_raw_input(self) -> None:
        composer = Composer(Index.build([entry('jan', 'J')]))
        effects = self.type_string('janx', composer)
        self.assertEqual(candidate_outputs(effects.candidates), ('J', 'J', 'J'))
        effects = self.process(Event.enter(), composer)
        self.assertEqual(effects.commit_text, 'janx')
        self.assertTrue(effects.ended)
        self.assertFalse(composer.is_composing())

    def test_scenario_space_without_suggestions(self) -> None:
        effects = self.type_string('xy')
        self.assertEqual(effects.candidates, [])
        effects = self.process(Event.space())
        self.assertTrue(effects.consumed)
        self.assertEqual(effects.commit_text, 'xy')
        self.assertTrue(effects.ended)
        self.assertFalse(self.composer.is_composing())

    def test_scenario_disable_commits_verbatim(self) -> None:
        composer = Composer(Index.build([entry('x', 'X')]))
        self.type_string('xyz', composer)
        self.process(Event.space(), composer)
        self.assertEqual(composer.get_selected(), 'X')
        self.assertEqual(composer.get_spelling(), 'yz')
        effects = self.process(Event.disable(), composer)
        self.assertEqual(effects.commit_text, 'Xyz')
        self.assertTrue(effects.ended)
        self.assertFalse(composer.is_composing())

    def test_number_selects_word_and_continues(self) -> None:
        effects = self.type_string('lilonsewi')
        self.assertEqual(candidate_outputs(effects.candidates),
                         ('ABC', 'A', 'A', 'B'))
        effects = self.process(Event.number_key(2))
        self.assertTrue(effects.consumed)
        self.assertIsNone(effects.commit_text)
        self.assertEqual(self.composer.get_selected(), 'A')
        self.assertEqual(self.composer.get_spelling(), 'lonsewi')
        self.assertEqual(effects.display_text, 'Alonsewi')
        self.assertEqual(effects.candidates[0], (0, 'BC'))
        # Boundaries are offsets into the display text:
        self.assertEqual(effects.word_boundaries, (4, 8))
        effects = self.process(Event.space())
        self.assertEqual(effects.commit_text, 'ABC')
        self.assertTrue(effects.ended)

    def test_selection_leaving_unmatched_rest(self) -> None:
        self.type_string('lilonsewi')
        effects = self.process(Event.number_key(4))
        self.assertEqual(self.composer.get_selected(), 'B')
        self.assertEqual(self.composer.get_spelling(), 'ilonsewi')
        self.assertEqual(effects.candidates, [])
        effects = self.process(Event.space())
        self.assertEqual(effects.commit_text, 'Bilonsewi')

    def test_invalid_selection_index(self) -> None:
        self.type_string('l')
        for number in (3, 5, 0):
            effects = self.process(Event.number_key(number))
            self.assertFalse(effects.consumed)
            self.assertIsNone(effects.commit_text)
        self.assertTrue(self.composer.is_composing())
        self.assertEqual(self.composer.get_spelling(), 'l')
        self.process(Event.backspace())
        # Without suggestions, only the first index releases the input:
        self.type_string('x')
        effects = self.process(Event.number_key(2))
        self.assertFalse(effects.consumed)
        self.assertTrue(self.composer.is_composing())
        effects = self.process(Event.number_key(1))
        self.assertEqual(effects.commit_text, 'x')

    def test_enter_with_selection(self) -> None:
        self.type_string('lilo')
        self.process(Event.number_key(2))
        self.assertEqual(self.composer.get_selected(), 'A')
        self.assertEqual(self.composer.get_spelling(), 'lo')
        effects = self.process(Event.enter())
        self.assertEqual(effects.commit_text, 'A lo')

    def test_backspace(self) -> None:
        self.type_string('li')
        effects = self.process(Event.backspace())
        self.assertTrue(effects.consumed)
        self.assertEqual(effects.display_text, 'l')
        self.assertEqual(candidate_outputs(effects.candidates), ('A', 'B'))
        effects = self.process(Event.backspace())
        self.assertTrue(effects.consumed)
        self.assertTrue(effects.ended)
        self.assertIsNone(effects.commit_text)
        self.assertFalse(self.composer.is_composing())

    def test_backspace_reaches_idle_after_length_steps(self) -> None:
        for text in ('l', 'lilonsewi', 'xyz', 'o`li'):
            self.type_string(text)
            steps = 0
            while self.composer.is_composing():
                self.process(Event.backspace())
                steps += 1
            self.assertEqual(steps, len(text))

    def test_backspace_discards_selection(self) -> None:
        self.type_string('lilo')
        self.process(Event.number_key(2))
        self.process(Event.backspace())
        effects = self.process(Event.backspace())
        self.assertTrue(effects.ended)
        self.assertIsNone(effects.commit_text)
        self.assertEqual(self.composer.get_selected(), '')

    def test_terminator_punctuation(self) -> None:
        self.type_string('li')
        effects = self.process(Event.punct('.'))
        self.assertEqual(effects.commit_text, 'li।')
        self.assertTrue(effects.ended)
        self.type_string('li')
        effects = self.process(Event.punct(','))
        self.assertEqual(effects.commit_text, 'li,')

    def test_joiner_punctuation(self) -> None:
        self.type_string('o')
        effects = self.process(Event.punct('`'))
        self.assertTrue(effects.consumed)
        self.assertFalse(effects.ended)
        self.assertEqual(effects.display_text, 'o`')
        self.assertEqual(candidate_outputs(effects.candidates), ('O', 'O'))
        effects = self.process(Event.space())
        self.assertEqual(effects.commit_text, 'O')

    def test_smart_quotes_alternate_across_compositions(self) -> None:
        self.type_string('li')
        self.assertEqual(self.process(Event.punct('"')).commit_text, 'li“')
        self.type_string('lon')
        self.assertEqual(self.process(Event.punct('"')).commit_text, 'lon”')
        self.type_string('li')
        self.assertEqual(self.process(Event.punct('"')).commit_text, 'li“')
        # Focus loss starts with an opening quote again:
        self.process(Event.focus_lost())
        self.type_string('li')
        self.assertEqual(self.process(Event.punct('"')).commit_text, 'li“')
        self.process(Event.disable())
        self.type_string('li')
        self.assertEqual(self.process(Event.punct('"')).commit_text, 'li“')

    def test_smart_quoting_off(self) -> None:
        composer = Composer(self.index, ComposerConfig(smart_quoting=False))
        self.type_string('li', composer)
        self.assertEqual(
            self.process(Event.punct('"'), composer).commit_text, 'li"')

    def test_remap_punctuation_when_idle(self) -> None:
        composer = Composer(
            self.index, ComposerConfig(remap_punctuation_when_idle=True))
        effects = self.process(Event.punct('.'), composer)
        self.assertTrue(effects.consumed)
        self.assertEqual(effects.commit_text, '।')
        self.assertFalse(composer.is_composing())
        self.assertEqual(self.process(Event.punct('"'), composer).commit_text, '“')
        self.assertEqual(self.process(Event.punct('"'), composer).commit_text, '”')
        effects = self.process(Event.punct(','), composer)
        self.assertFalse(effects.consumed)

    def test_focus_lost_commits_verbatim(self) -> None:
        self.type_string('lilo')
        self.process(Event.number_key(2))
        effects = self.process(Event.focus_lost())
        self.assertTrue(effects.consumed)
        self.assertEqual(effects.commit_text, 'Alo')
        self.assertTrue(effects.ended)

    def test_upper_case_letters(self) -> None:
        effects = self.type_string('Li')
        self.assertEqual(effects.display_text, 'Li')
        self.assertEqual(candidate_outputs(effects.candidates), ('A', 'A', 'B'))
        self.assertEqual(self.process(Event.enter()).commit_text, 'Li')

    def test_invalid_events_while_composing(self) -> None:
        self.type_string('li')
        for event in (Event.letter('1'), Event.letter('ক'), Event.punct('..')):
            effects = self.process(event)
            self.assertFalse(effects.consumed)
        self.assertEqual(self.composer.get_spelling(), 'li')

    def test_sentence_matching_off(self) -> None:
        composer = Composer(self.index, ComposerConfig(sentence_matching=False))
        effects = self.type_string('lilonsewi', composer)
        self.assertEqual(candidate_outputs(effects.candidates), ('A', 'A', 'B'))
        self.assertEqual(effects.word_boundaries, (2,))

    def test_candidate_cap(self) -> None:
        composer = Composer(self.index, ComposerConfig(candidate_cap=2))
        effects = self.type_string('janx', composer)
        self.assertEqual(candidate_outputs(effects.candidates), ('J', 'j1'))
        composer = Composer(self.index, ComposerConfig(candidate_cap=1))
        effects = self.type_string('lili', composer)
        self.assertEqual(candidate_outputs(effects.candidates), ('AA',))

    def test_long_spelling_of_one_letter_words(self) -> None:
        composer = Composer(Index.build([entry('a', 'X')]))
        effects = self.type_string('a' * 2000, composer)
        self.assertTrue(effects.consumed)
        self.assertEqual(composer.get_spelling(), 'a' * 2000)
        suggestions = composer.get_suggestions()
        self.assertEqual(suggestions[0].output, 'X' * 2000)
        self.assertEqual(suggestions[0].end, 2000)
        self.assertEqual(len(effects.word_boundaries), 2000)
        effects = self.process(Event.space(), composer)
        self.assertEqual(effects.commit_text, 'X' * 2000)
        self.assertFalse(composer.is_composing())

    def test_recompute_is_idempotent(self) -> None:
        self.assertEqual(self.composer.recompute(), Effects())
        effects = self.type_string('lilonsewi')
        first = self.composer.recompute()
        second = self.composer.recompute()
        self.assertEqual(first, second)
        self.assertEqual(first, effects)

class ComposerLockTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.lock = threading.Lock()
        self.composer = Composer(testutils.sample_index(), lock=self.lock)

    def tearDown(self) -> None:
        if self.lock.locked():
            self.lock.release()

    def test_busy_lock(self) -> None:
        self.composer.process_event(Event.letter('l'))
        self.lock.acquire()
        self.assertIsNone(
            self.composer.process_event(Event.letter('i'), timeout=0.01))
        self.assertIsNone(self.composer.try_process_event(Event.focus_lost()))
        self.assertEqual(self.composer.get_spelling(), 'l')
        self.assertTrue(self.composer.is_composing())
        self.lock.release()
        # Retrying after the failure works:
        effects = self.composer.process_event(Event.letter('i'))
        assert effects is not None
        self.assertEqual(effects.display_text, 'li')
        effects = self.composer.try_process_event(Event.focus_lost())
        assert effects is not None
        self.assertEqual(effects.commit_text, 'li')
        self.assertFalse(self.lock.locked())

    def test_lock_released_after_each_transition(self) -> None:
        for event in (Event.letter('l'), Event.number_key(9),
                      Event.backspace(), Event.space()):
            self.composer.process_event(event)
            self.assertFalse(self.lock.locked())

if __name__ == '__main__':
    unittest.main()
