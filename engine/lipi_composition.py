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

'''
The composition state machine of ibus-lipi

It does not know anything about IBus. The host feeds it normalized
input events and applies the returned effects (preedit text,
candidates, text to commit).
'''

from typing import List
from typing import Optional
from typing import Tuple
from typing import Any
import enum
import logging
import threading
from dataclasses import dataclass, field

from lipi_dictionary import Index
from lipi_suggest import Suggestion, suggest_sentence, suggest_word
import lipi_suggest

LOGGER = logging.getLogger('ibus-lipi')

DEBUG_LEVEL = int(0)

# How long process_event() waits for the host lock:
LOCK_TIMEOUT_SECONDS = 0.5

class EventKind(enum.Enum):
    '''The kinds of input events the host delivers'''
    LETTER = 'letter'
    NUMBER = 'number'
    PUNCT = 'punct'
    SPACE = 'space'
    BACKSPACE = 'backspace'
    ENTER = 'enter'
    DISABLE = 'disable'
    FOCUS_LOST = 'focus-lost'

    def __str__(self) -> str:
        return self.value

@dataclass(frozen=True)
class Event:
    '''A normalized input event

    :param kind: What happened
    :param char: The character for LETTER and PUNCT events
    :param number: The candidate number (1 based) for NUMBER events
    '''
    kind: EventKind
    char: str = ''
    number: int = 0

    @classmethod
    def letter(cls, char: str) -> 'Event':
        return cls(EventKind.LETTER, char=char)

    @classmethod
    def number_key(cls, number: int) -> 'Event':
        return cls(EventKind.NUMBER, number=number)

    @classmethod
    def punct(cls, char: str) -> 'Event':
        return cls(EventKind.PUNCT, char=char)

    @classmethod
    def space(cls) -> 'Event':
        return cls(EventKind.SPACE)

    @classmethod
    def backspace(cls) -> 'Event':
        return cls(EventKind.BACKSPACE)

    @classmethod
    def enter(cls) -> 'Event':
        return cls(EventKind.ENTER)

    @classmethod
    def disable(cls) -> 'Event':
        return cls(EventKind.DISABLE)

    @classmethod
    def focus_lost(cls) -> 'Event':
        return cls(EventKind.FOCUS_LOST)

    def __str__(self) -> str:
        if self.kind in (EventKind.LETTER, EventKind.PUNCT):
            return f'{self.kind}({self.char!r})'
        if self.kind == EventKind.NUMBER:
            return f'{self.kind}({self.number})'
        return str(self.kind)

@dataclass
class Effects:
    '''What the host has to do after a transition

    :param consumed: Whether the event was handled. If False, the
                     host passes the key through to the application.
    :param updated: Whether the preedit and the candidate list
                    changed and have to be redrawn
    :param display_text: The text to show as the composition
    :param word_boundaries: Offsets into display_text where the
                            words of the first suggestion end
    :param candidates: (index, output) pairs for the candidate list,
                       empty means hide the list
    :param commit_text: Text to insert into the document, replacing
                        the composition
    :param ended: The composition has ended, clear the preedit
    '''
    consumed: bool = False
    updated: bool = False
    display_text: str = ''
    word_boundaries: Tuple[int, ...] = ()
    candidates: List[Tuple[int, str]] = field(default_factory=list)
    commit_text: Optional[str] = None
    ended: bool = False

class Session:
    '''The state of the current composition

    Only the Composer owns a Session.
    '''
    def __init__(self) -> None:
        self.spelling = ''
        self.selected = ''
        self.suggestions: List[Suggestion] = []
        self.active = False
        # Alternates opening and closing quotes. Survives the end of
        # a composition, cleared on focus loss and disable.
        self.quote_count = 0

    def reset(self) -> None:
        '''End the composition, keep the quote counter'''
        self.spelling = ''
        self.selected = ''
        self.suggestions = []
        self.active = False

    def __repr__(self) -> str:
        return (f'Session(spelling={self.spelling!r}, '
                f'selected={self.selected!r}, '
                f'suggestions={len(self.suggestions)}, '
                f'active={self.active}, '
                f'quote_count={self.quote_count})')

@dataclass
class ComposerConfig:
    '''Settings of the composition state machine

    :param candidate_cap: Maximum number of suggestions (K)
    :param sentence_matching: Whether to suggest multi-word
                              decompositions of the spelling
    :param smart_quoting: Whether quote characters alternate between
                          their opening and closing forms
    :param remap_punctuation_when_idle: Whether punctuation typed
                                        outside of a composition is
                                        remapped and committed
    '''
    candidate_cap: int = lipi_suggest.CANDIDATE_CAP
    sentence_matching: bool = True
    smart_quoting: bool = True
    remap_punctuation_when_idle: bool = False

class Composer:
    '''The composition state machine

    There are two states, idle and composing. process_event() runs
    exactly one transition under the host lock.
    '''
    def __init__(
            self,
            index: Index,
            config: Optional[ComposerConfig] = None,
            lock: Optional[Any] = None) -> None:
        '''
        :param index: The dictionary index to look up suggestions in
        :param config: The settings, defaults if None
        :param lock: The lock shared with the host, needs acquire()
                     with “blocking” and “timeout” arguments and
                     release(). A new threading.Lock if None.
        '''
        self._index = index
        self._config = config if config is not None else ComposerConfig()
        self._lock = lock if lock is not None else threading.Lock()
        self._session = Session()

    @property
    def index(self) -> Index:
        return self._index

    @property
    def config(self) -> ComposerConfig:
        return self._config

    def is_composing(self) -> bool:
        '''Whether a composition is open'''
        return self._session.active

    def get_spelling(self) -> str:
        return self._session.spelling

    def get_selected(self) -> str:
        return self._session.selected

    def get_suggestions(self) -> List[Suggestion]:
        return list(self._session.suggestions)

    def process_event(
            self,
            event: Event,
            timeout: float = LOCK_TIMEOUT_SECONDS) -> Optional[Effects]:
        '''Run the transition for an event

        :param event: The input event
        :param timeout: Seconds to wait for the host lock
        :return: The effects for the host or None if the lock could
                 not be acquired. Nothing has changed in that case and
                 the call can be retried.
        '''
        if not self._lock.acquire(blocking=True, timeout=timeout):
            LOGGER.debug('Lock not acquired within %s s, event %s dropped',
                         timeout, event)
            return None
        try:
            return self._transition(event)
        finally:
            self._lock.release()

    def try_process_event(self, event: Event) -> Optional[Effects]:
        '''Like process_event() but does not wait for the host lock

        For notifications which may arrive while the host already
        holds the lock, for example the termination of a composition
        triggered by a transition.
        '''
        if not self._lock.acquire(blocking=False):
            LOGGER.debug('Lock busy, event %s dropped', event)
            return None
        try:
            return self._transition(event)
        finally:
            self._lock.release()

    def recompute(self) -> Effects:
        '''Recompute the suggestions for the current spelling and render

        Returns the same effects when called again without a change
        of the spelling.
        '''
        self._lock.acquire()
        try:
            if not self._session.active:
                return Effects()
            self._recompute()
            return self._render()
        finally:
            self._lock.release()

    def _transition(self, event: Event) -> Effects:
        if DEBUG_LEVEL > 1:
            LOGGER.debug('event=%s session=%r', event, self._session)
        if self._session.active:
            effects = self._composing(event)
        else:
            effects = self._idle(event)
        if DEBUG_LEVEL > 1:
            LOGGER.debug('effects=%s', effects)
        return effects

    def _idle(self, event: Event) -> Effects:
        if event.kind == EventKind.LETTER and _is_letter(event.char):
            self._session.active = True
            self._session.spelling = event.char
            self._recompute()
            return self._render()
        if event.kind in (EventKind.DISABLE, EventKind.FOCUS_LOST):
            self._session.quote_count = 0
            return Effects()
        if (event.kind == EventKind.PUNCT
                and self._config.remap_punctuation_when_idle):
            remapped = self._remap_punctuation(event.char)
            if remapped is not None:
                return Effects(consumed=True, commit_text=remapped)
        return Effects()

    def _composing(self, event: Event) -> Effects:
        session = self._session
        if event.kind == EventKind.LETTER:
            if not _is_letter(event.char):
                return Effects()
            return self._append(event.char)
        if event.kind == EventKind.BACKSPACE:
            session.spelling = session.spelling[:-1]
            if not session.spelling:
                return self._end(None)
            self._recompute()
            return self._render()
        if event.kind == EventKind.NUMBER:
            return self._select(event.number - 1)
        if event.kind == EventKind.SPACE:
            return self._select(0)
        if event.kind == EventKind.ENTER:
            if session.selected:
                return self._end(session.selected + ' ' + session.spelling)
            return self._end(session.spelling)
        if event.kind == EventKind.PUNCT:
            if len(event.char) != 1:
                return Effects()
            if self._index.is_joiner(event.char):
                return self._append(event.char)
            remapped = self._remap_punctuation(event.char)
            if remapped is None:
                remapped = event.char
            return self._end(session.selected + session.spelling + remapped)
        if event.kind in (EventKind.DISABLE, EventKind.FOCUS_LOST):
            session.quote_count = 0
            return self._end(session.selected + session.spelling)
        return Effects()

    def _append(self, char: str) -> Effects:
        self._session.spelling += char
        self._recompute()
        return self._render()

    def _select(self, index: int) -> Effects:
        '''Apply the suggestion at index'''
        session = self._session
        if not session.suggestions:
            if index == 0:
                # Nothing to choose from, release the raw input:
                return self._end(session.selected + session.spelling)
            return Effects()
        if not 0 <= index < len(session.suggestions):
            if DEBUG_LEVEL > 0:
                LOGGER.debug('Invalid selection index %s', index)
            return Effects()
        suggestion = session.suggestions[index]
        session.selected += suggestion.output
        if suggestion.end >= len(session.spelling):
            return self._end(session.selected)
        session.spelling = session.spelling[suggestion.end:]
        self._recompute()
        return self._render()

    def _remap_punctuation(self, char: str) -> Optional[str]:
        if self._config.smart_quoting:
            quote = self._index.quote(char, self._session.quote_count)
            if quote is not None:
                self._session.quote_count += 1
                return quote
        return self._index.punctuation(char)

    def _recompute(self) -> None:
        spelling = self._session.spelling
        cap = self._config.candidate_cap
        suggestions: List[Suggestion] = []
        if self._config.sentence_matching:
            sentence = suggest_sentence(self._index, spelling)
            if sentence is not None:
                suggestions.append(sentence)
        suggestions += suggest_word(
            self._index, spelling, limit=cap - len(suggestions))
        self._session.suggestions = suggestions[:cap]

    def _render(self) -> Effects:
        session = self._session
        word_boundaries: Tuple[int, ...] = ()
        if session.suggestions:
            word_boundaries = tuple(
                len(session.selected) + boundary
                for boundary in session.suggestions[0].boundaries)
        return Effects(
            consumed=True,
            updated=True,
            display_text=session.selected + session.spelling,
            word_boundaries=word_boundaries,
            candidates=[(number, suggestion.output)
                        for number, suggestion
                        in enumerate(session.suggestions)])

    def _end(self, commit_text: Optional[str]) -> Effects:
        self._session.reset()
        return Effects(
            consumed=True,
            updated=True,
            commit_text=commit_text,
            ended=True)

def _is_letter(char: str) -> bool:
    return len(char) == 1 and char.isascii() and char.isalpha()
