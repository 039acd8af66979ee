# vim:et sts=4 sw=4
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

'''A module used by ibus-lipi to suggest transliterations for the
typed spelling by looking up prefixes in the dictionary index.

'''

from typing import Iterator
from typing import List
from typing import Optional
from typing import Set
from typing import Tuple
import sys
import logging
from dataclasses import dataclass

from lipi_dictionary import CandidateEntry, CandidateKind, Index

LOGGER = logging.getLogger('ibus-lipi')

DEBUG_LEVEL = int(0)

# Default maximum number of suggestions shown:
CANDIDATE_CAP = 5

# Step scores of the sentence matcher
UNIQUE_SCORE_PER_CHAR = 20
EXACT_SCORE = 10
EXACT_SCORE_PER_CHAR = 5

@dataclass(frozen=True)
class Suggestion:
    '''A proposed rendering for (a prefix of) the typed spelling

    :param output: The text of the matched word(s)
    :param boundaries: One offset into the spelling per matched word,
                       strictly increasing, marking where the input
                       of that word ends. Spellings are ASCII so these
                       are byte offsets as well.
    '''
    output: str
    boundaries: Tuple[int, ...]

    @property
    def end(self) -> int:
        '''The offset up to which this suggestion consumes the spelling'''
        return self.boundaries[-1]

def suggest_word(
        index: Index,
        spelling: str,
        limit: int = CANDIDATE_CAP) -> List[Suggestion]:
    '''Suggest single words for the spelling, longest prefix first

    :param index: The dictionary index
    :param spelling: The typed spelling
    :param limit: Maximum number of suggestions returned
    :return: The suggestions, matches of longer prefixes first. Among
             matches of the same prefix, the order of the index entry
             is kept. Empty if no prefix of the spelling is known.

    Examples:

    >>> from lipi_dictionary import DictionaryEntry
    >>> index = Index.build([
    ...     DictionaryEntry('jan', 'J', ('j1', 'j2')),
    ...     DictionaryEntry('ja', 'K')])
    >>> [(s.output, s.boundaries) for s in suggest_word(index, 'janx')]
    [('J', (3,)), ('j1', (3,)), ('j2', (3,)), ('K', (2,)), ('J', (1,))]
    >>> len(suggest_word(index, 'janx', limit=2))
    2
    >>> suggest_word(index, 'xyz')
    []
    '''
    suggestions: List[Suggestion] = []
    if limit < 1:
        return suggestions
    longest = min(len(spelling), index.longest_spelling)
    for length in range(longest, 0, -1):
        entry = index.lookup(spelling[:length])
        if entry is None:
            continue
        for word in entry.words:
            suggestions.append(Suggestion(word, (length,)))
            if len(suggestions) >= limit:
                return suggestions
    return suggestions

def _step_score(entry: CandidateEntry, length: int) -> int:
    if entry.kind == CandidateKind.UNIQUE:
        return UNIQUE_SCORE_PER_CHAR * length
    return EXACT_SCORE + EXACT_SCORE_PER_CHAR * length

def suggest_sentence(index: Index, spelling: str) -> Optional[Suggestion]:
    '''Decompose the spelling into two or more consecutive words

    This is a first fit search: prefixes are tried longest first and
    the first decomposition consuming the whole spelling with at least
    two words is returned.

    :param index: The dictionary index
    :param spelling: The typed spelling
    :return: One suggestion with one boundary per word or None

    Examples:

    >>> from lipi_dictionary import DictionaryEntry
    >>> index = Index.build([
    ...     DictionaryEntry('li', 'A'),
    ...     DictionaryEntry('lon', 'B'),
    ...     DictionaryEntry('sewi', 'C')])
    >>> suggest_sentence(index, 'lilonsewi')
    Suggestion(output='ABC', boundaries=(2, 5, 9))
    >>> suggest_sentence(index, 'lon') is None
    True
    '''
    if not spelling:
        return None
    # Positions from which the rest of the spelling cannot be
    # decomposed. Every position after the first word is reached
    # with at least one word matched, so a failure there is final.
    dead_ends: Set[int] = set()
    words: List[str] = []
    boundaries: List[int] = []

    def _steps(position: int) -> Iterator[Tuple[int, int, CandidateEntry]]:
        remainder = spelling[position:position + index.longest_spelling]
        steps = []
        for length in range(len(remainder), 0, -1):
            entry = index.lookup(remainder[:length])
            if entry is not None:
                steps.append((length, _step_score(entry, length), entry))
        steps.sort(key=lambda step: (step[0], step[1]), reverse=True)
        return iter(steps)

    # Depth first search with an explicit stack of
    # (position, score so far, untried steps from position):
    stack = [(0, 0, _steps(0))]
    while stack:
        position, score, steps = stack[-1]
        step = next(steps, None)
        if step is None:
            stack.pop()
            if position > 0:
                dead_ends.add(position)
                words.pop()
                boundaries.pop()
            continue
        length, step_score, entry = step
        end = position + length
        if end == len(spelling):
            if not boundaries:
                # One word is not a sentence
                continue
            words.append(entry.word)
            boundaries.append(end)
            if DEBUG_LEVEL > 1:
                LOGGER.debug('spelling=%r boundaries=%s score=%s',
                             spelling, boundaries, score + step_score)
            return Suggestion(''.join(words), tuple(boundaries))
        if end in dead_ends:
            continue
        words.append(entry.word)
        boundaries.append(end)
        stack.append((end, score + step_score, _steps(end)))
    return None

if __name__ == "__main__":
    LOG_HANDLER = logging.StreamHandler(stream=sys.stderr)
    LOGGER.setLevel(logging.DEBUG)
    LOGGER.addHandler(LOG_HANDLER)
    import doctest
    (FAILED, ATTEMPTED) = doctest.testmod()
    sys.exit(FAILED)
