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

'''A module used by ibus-lipi to load transliteration dictionaries
and to build the prefix index the suggestions are looked up in.

'''

from typing import Dict
from typing import FrozenSet
from typing import Iterable
from typing import List
from typing import Optional
from typing import Sequence
from typing import Tuple
from typing import Union
import sys
import enum
import logging
from dataclasses import dataclass, field

import regex # type: ignore

LOGGER = logging.getLogger('ibus-lipi')

DEBUG_LEVEL = int(0)

# A spelling starts with a lowercase ASCII letter and may continue with
# lowercase ASCII letters and ASCII punctuation (the punctuation
# characters used inside spellings become “joiners”). Digits are not
# allowed, they select candidates.
SPELLING_PATTERN = regex.compile(
    r'^[a-z][a-z!-/:-@\[-`{-~]*$')
# Source characters of punctuation and quote remappings:
PUNCTUATION_PATTERN = regex.compile(r'^[!-/:-@\[-`{-~]$')
# Outputs must not contain control characters (TAB, newline, ...):
CONTROL_CHARACTER_PATTERN = regex.compile(r'\p{Cc}')
SECTION_PATTERN = regex.compile(r'^\[(?P<section>[^\]]*)\]$')

SECTION_WORDS = 'words'
SECTION_PUNCTUATION = 'punctuation'
SECTION_QUOTES = 'quotes'
SECTIONS = (SECTION_WORDS, SECTION_PUNCTUATION, SECTION_QUOTES)

class MalformedDictionaryEntry(ValueError):
    '''Raised for a dictionary entry which cannot be indexed'''

@dataclass(frozen=True)
class DictionaryEntry:
    '''One word of a transliteration dictionary

    :param spelling: The lowercase Latin lookup key
    :param output: The primary text this spelling maps to
    :param alternatives: Further outputs for the same spelling,
                         in the order they were loaded
    '''
    spelling: str
    output: str
    alternatives: Tuple[str, ...] = ()

    def outputs(self) -> Tuple[str, ...]:
        '''Returns the primary output followed by the alternatives'''
        return (self.output,) + self.alternatives

class CandidateKind(enum.Enum):
    '''How the loaded spellings continue a prefix'''
    UNIQUE = 'unique'
    EXACT = 'exact'
    DUPLICATES = 'duplicates'

    def __str__(self) -> str:
        return self.value

@dataclass(frozen=True)
class CandidateEntry:
    '''The index entry for one prefix

    UNIQUE:     exactly one spelling starts with the prefix,
                words == (output of that spelling,)
    EXACT:      the prefix is a complete spelling,
                words == (primary output, alternative, ...)
    DUPLICATES: several spellings start with the prefix,
                words == (output of each spelling, in load order)
    '''
    kind: CandidateKind
    words: Tuple[str, ...]

    @property
    def word(self) -> str:
        '''The first (primary) word of this entry'''
        return self.words[0]

    @property
    def alternatives(self) -> Tuple[str, ...]:
        '''For EXACT entries, the outputs following the primary one'''
        if self.kind == CandidateKind.EXACT:
            return self.words[1:]
        return ()

@dataclass(frozen=True)
class QuotePair:
    '''Opening and closing form of a quote character'''
    opening: str
    closing: str

@dataclass
class _SpellingData:
    outputs: List[str] = field(default_factory=list)

class Index:
    '''Immutable prefix index over the loaded dictionary entries

    Every prefix of every loaded spelling has exactly one
    CandidateEntry. Strings which are not a prefix of any spelling
    have none.

    Examples:

    >>> index = Index.build([
    ...     DictionaryEntry('li', 'A'),
    ...     DictionaryEntry('lon', 'B'),
    ...     DictionaryEntry('sewi', 'C')])
    >>> str(index.lookup('l').kind), index.lookup('l').words
    ('duplicates', ('A', 'B'))
    >>> str(index.lookup('lo').kind), index.lookup('lo').words
    ('unique', ('B',))
    >>> str(index.lookup('li').kind), index.lookup('li').words
    ('exact', ('A',))
    >>> index.lookup('lx') is None
    True
    '''
    def __init__(
            self,
            entries: Dict[str, CandidateEntry],
            spellings: Dict[str, DictionaryEntry],
            punctuation: Dict[str, str],
            quotes: Dict[str, QuotePair]) -> None:
        self._entries = entries
        self._spellings = spellings
        self._punctuation = punctuation
        self._quotes = quotes
        joiners = set()
        for spelling in spellings:
            joiners.update(char for char in spelling if not char.isalpha())
        self._joiners: FrozenSet[str] = frozenset(joiners)
        self._longest_spelling = max(
            (len(spelling) for spelling in spellings), default=0)

    @classmethod
    def build(
            cls,
            entries: Iterable[DictionaryEntry],
            punctuation: Optional[Dict[str, str]] = None,
            quotes: Optional[Dict[str, QuotePair]] = None) -> 'Index':
        '''Build an index from dictionary entries

        :param entries: The words, in load order. A spelling occurring
                        more than once is merged: later outputs are
                        appended to the alternatives of the first
                        definition, already known outputs are skipped.
        :param punctuation: Mapping of punctuation characters to their
                            replacements
        :param quotes: Mapping of quote characters to their
                       opening and closing forms
        :raise MalformedDictionaryEntry: if an entry has an empty
                                         spelling or output
        '''
        merged: Dict[str, _SpellingData] = {}
        for entry in entries:
            if not entry.spelling or not entry.output:
                raise MalformedDictionaryEntry(
                    f'empty spelling or output in {entry!r}')
            spelling = entry.spelling.lower()
            data = merged.setdefault(spelling, _SpellingData())
            for output in entry.outputs():
                if output and output not in data.outputs:
                    data.outputs.append(output)
        # For each prefix, the spellings starting with it, in
        # discovery order:
        continuations: Dict[str, List[str]] = {}
        for spelling in merged:
            for length in range(1, len(spelling) + 1):
                continuations.setdefault(
                    spelling[:length], []).append(spelling)
        index_entries: Dict[str, CandidateEntry] = {}
        for prefix, spellings in continuations.items():
            if prefix in merged:
                index_entries[prefix] = CandidateEntry(
                    CandidateKind.EXACT, tuple(merged[prefix].outputs))
            elif len(spellings) == 1:
                index_entries[prefix] = CandidateEntry(
                    CandidateKind.UNIQUE,
                    (merged[spellings[0]].outputs[0],))
            else:
                words: List[str] = []
                for spelling in spellings:
                    word = merged[spelling].outputs[0]
                    if word not in words:
                        words.append(word)
                index_entries[prefix] = CandidateEntry(
                    CandidateKind.DUPLICATES, tuple(words))
        dictionary_entries = {
            spelling: DictionaryEntry(
                spelling, data.outputs[0], tuple(data.outputs[1:]))
            for spelling, data in merged.items()}
        if DEBUG_LEVEL > 1:
            LOGGER.debug(
                'Built index: %s spellings, %s prefixes',
                len(dictionary_entries), len(index_entries))
        return cls(index_entries,
                   dictionary_entries,
                   dict(punctuation or {}),
                   dict(quotes or {}))

    @property
    def longest_spelling(self) -> int:
        '''Length of the longest loaded spelling, no longer prefix can
        have an entry'''
        return self._longest_spelling

    def lookup(self, prefix: str) -> Optional[CandidateEntry]:
        '''Look up the candidate entry for a spelling prefix

        :param prefix: The prefix, lookup is case insensitive
        :return: The entry or None if no loaded spelling starts
                 with this prefix
        '''
        if not prefix:
            return None
        return self._entries.get(prefix.lower())

    def punctuation(self, char: str) -> Optional[str]:
        '''Returns the replacement for a punctuation character, if any'''
        return self._punctuation.get(char)

    def quote(self, char: str, counter: int) -> Optional[str]:
        '''Returns the opening or closing form of a quote character

        :param char: The quote character typed
        :param counter: How often quotes were used before, even
                        counters give the opening form, odd ones
                        the closing form
        '''
        pair = self._quotes.get(char)
        if pair is None:
            return None
        if counter % 2:
            return pair.closing
        return pair.opening

    def is_joiner(self, char: str) -> bool:
        '''Whether a character occurs inside some loaded spelling

        Such punctuation is appended to the spelling instead of
        ending the composition.
        '''
        return char in self._joiners

    def entry(self, spelling: str) -> Optional[DictionaryEntry]:
        '''Returns the merged dictionary entry of a complete spelling'''
        return self._spellings.get(spelling.lower())

    def __len__(self) -> int:
        return len(self._spellings)

    def __contains__(self, spelling: object) -> bool:
        return isinstance(spelling, str) and spelling.lower() in self._spellings

class DictionaryParser:
    '''Collects entries from line-oriented dictionary files

    Malformed lines are skipped with a warning, loading continues.
    '''
    def __init__(self) -> None:
        self.entries: List[DictionaryEntry] = []
        self.punctuation: Dict[str, str] = {}
        self.quotes: Dict[str, QuotePair] = {}
        self.skipped_lines = 0

    def _warn(self, source: str, line_number: int, reason: str) -> None:
        self.skipped_lines += 1
        LOGGER.warning(
            'Malformed dictionary line %s:%s skipped: %s',
            source, line_number, reason)

    def parse_lines(
            self,
            lines: Iterable[Union[str, bytes]],
            source: str = '<data>') -> None:
        '''Parse dictionary lines

        :param lines: The lines of a dictionary file. Lines given as
                      bytes are decoded as UTF-8, a line which cannot
                      be decoded is skipped.
        :param source: Name of the file for log messages
        '''
        section: Optional[str] = SECTION_WORDS
        for line_number, raw_line in enumerate(lines, start=1):
            if isinstance(raw_line, bytes):
                try:
                    line = raw_line.decode('UTF-8')
                except UnicodeDecodeError as error:
                    self._warn(source, line_number, f'invalid UTF-8: {error}')
                    continue
            else:
                line = raw_line
            line = line.rstrip('\r\n')
            if not line.strip() or line.lstrip().startswith('#'):
                continue
            match = SECTION_PATTERN.match(line.strip())
            if match:
                section = match.group('section').strip().lower()
                if section not in SECTIONS:
                    self._warn(source, line_number,
                               f'unknown section “{section}”')
                    section = None
                continue
            if section is None:
                self._warn(source, line_number, 'line in unknown section')
                continue
            fields = line.split('\t')
            if section == SECTION_WORDS:
                self._parse_word(fields, source, line_number)
            elif section == SECTION_PUNCTUATION:
                self._parse_punctuation(fields, source, line_number)
            else:
                self._parse_quote(fields, source, line_number)

    def _check_outputs(
            self,
            outputs: Sequence[str],
            source: str,
            line_number: int) -> bool:
        for output in outputs:
            if not output:
                self._warn(source, line_number, 'empty output')
                return False
            if CONTROL_CHARACTER_PATTERN.search(output):
                self._warn(source, line_number,
                           f'control character in output {output!r}')
                return False
        return True

    def _parse_word(
            self, fields: List[str], source: str, line_number: int) -> None:
        if len(fields) < 2:
            self._warn(source, line_number, 'expected spelling and output')
            return
        spelling = fields[0]
        if not SPELLING_PATTERN.match(spelling):
            self._warn(source, line_number, f'invalid spelling {spelling!r}')
            return
        if not self._check_outputs(fields[1:], source, line_number):
            return
        self.entries.append(
            DictionaryEntry(spelling, fields[1], tuple(fields[2:])))

    def _parse_punctuation(
            self, fields: List[str], source: str, line_number: int) -> None:
        if len(fields) != 2 or not PUNCTUATION_PATTERN.match(fields[0]):
            self._warn(source, line_number,
                       'expected punctuation character and output')
            return
        if not self._check_outputs(fields[1:], source, line_number):
            return
        self.punctuation[fields[0]] = fields[1]

    def _parse_quote(
            self, fields: List[str], source: str, line_number: int) -> None:
        if len(fields) != 3 or not PUNCTUATION_PATTERN.match(fields[0]):
            self._warn(source, line_number,
                       'expected quote character, opening and closing form')
            return
        if not self._check_outputs(fields[1:], source, line_number):
            return
        self.quotes[fields[0]] = QuotePair(fields[1], fields[2])

    def parse_file(self, path: str) -> bool:
        '''Parse a dictionary file

        :param path: Full path of the dictionary file
        :return: True if the file could be read, False if not
        '''
        try:
            with open(path, 'rb') as dictionary_file:
                self.parse_lines(dictionary_file, source=path)
        except OSError as error:
            LOGGER.exception(
                'Error loading dictionary file %s: %s: %s',
                path, error.__class__.__name__, error)
            return False
        LOGGER.info('Loaded dictionary file %s', path)
        return True

    def build_index(self) -> Index:
        '''Build the index from everything parsed so far'''
        return Index.build(self.entries, self.punctuation, self.quotes)

def load_dictionary_files(paths: Iterable[str]) -> Index:
    '''Load several dictionary files into one index

    Later files extend earlier ones, nothing is replaced.
    Files which cannot be read are skipped.

    :param paths: The dictionary files, in load order
    '''
    parser = DictionaryParser()
    for path in paths:
        parser.parse_file(path)
    if parser.skipped_lines:
        LOGGER.warning('%s malformed dictionary lines skipped',
                       parser.skipped_lines)
    index = parser.build_index()
    LOGGER.info('Dictionary index with %s spellings ready', len(index))
    return index

if __name__ == "__main__":
    LOG_HANDLER = logging.StreamHandler(stream=sys.stderr)
    LOGGER.setLevel(logging.DEBUG)
    LOGGER.addHandler(LOG_HANDLER)
    import doctest
    (FAILED, ATTEMPTED) = doctest.testmod()
    sys.exit(FAILED)
