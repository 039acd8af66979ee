# -*- coding: utf-8 -*-
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
Utility functions used in ibus-lipi
'''

from typing import Any
from typing import Dict
from typing import List
from typing import Optional
from typing import Tuple
import sys
import os
import logging
from gi import require_version # type: ignore
require_version('IBus', '1.0')
from gi.repository import IBus # type: ignore
require_version('GLib', '2.0')
from gi.repository import GLib # type: ignore

import lipi_version
from lipi_composition import Event

LOGGER = logging.getLogger('ibus-lipi')

# When matching keybindings, only the bits in the following mask are
# considered for key.state:
KEYBINDING_STATE_MASK = (
    IBus.ModifierType.MODIFIER_MASK
    & ~IBus.ModifierType.LOCK_MASK # Caps Lock
    & ~IBus.ModifierType.MOD2_MASK # Num Lock
    & ~IBus.ModifierType.MOD3_MASK # Scroll Lock
)

DEFAULT_DICTIONARY = 'lipi.dict'
USER_DICTIONARY = 'user.dict'

def get_data_dir() -> str:
    '''Returns the directory of the bundled data files

    The environment variable IBUS_LIPI_LOCATION overrides the
    installed location. When running from the source tree, the
    “data” directory next to the “engine” directory is used.
    '''
    if os.getenv('IBUS_LIPI_LOCATION'):
        return os.path.join(str(os.getenv('IBUS_LIPI_LOCATION')), 'data')
    source_tree_data = os.path.join(
        os.path.dirname(os.path.abspath(__file__)), '..', 'data')
    if os.path.isdir(source_tree_data):
        return os.path.normpath(source_tree_data)
    return os.path.join(lipi_version.get_prefix(), 'share/ibus-lipi/data')

def xdg_save_data_path(*resource: str) -> str:
    '''Returns the user data directory for resource, creating it if needed

    Same as xdg.BaseDirectory.save_data_path() but without the race
    condition when creating the directory.
    '''
    xdg_data_home = os.environ.get('XDG_DATA_HOME') or os.path.join(
        os.path.expanduser('~'), '.local', 'share')
    resource_joined = os.path.join(*resource)
    assert not resource_joined.startswith('/')
    path = os.path.join(xdg_data_home, resource_joined)
    if not os.path.isdir(path):
        os.makedirs(path, exist_ok=True)
    return path

def default_dictionary_paths() -> List[str]:
    '''The dictionaries used when the “dictionaries” setting is empty

    The bundled dictionary, followed by the user dictionary
    ~/.local/share/ibus-lipi/user.dict if it exists. Entries of the user
    dictionary extend the bundled ones.
    '''
    paths = [os.path.join(get_data_dir(), DEFAULT_DICTIONARY)]
    user_dictionary = os.path.join(
        xdg_save_data_path('ibus-lipi'), USER_DICTIONARY)
    if os.path.isfile(user_dictionary):
        paths.append(user_dictionary)
    return paths

def variant_to_value(variant: GLib.Variant) -> Any:
    '''
    Convert a GLib variant to a value
    '''
    if not isinstance(variant, GLib.Variant):
        return variant
    type_string = variant.get_type_string()
    if type_string == 's':
        return variant.get_string()
    if type_string == 'i':
        return variant.get_int32()
    if type_string == 'b':
        return variant.get_boolean()
    if type_string and type_string[0] == 'a':
        return variant.unpack()
    LOGGER.error('unknown variant type: %s', type_string)
    return variant

def is_ascii(text: str) -> bool:
    '''Checks whether all characters in text are ASCII characters

    Returns “True” if the text is all ASCII, “False” if not.

    :param text: The text to check

    Examples:

    >>> is_ascii('Abc')
    True

    >>> is_ascii('আমি')
    False
    '''
    try:
        text.encode('ascii')
    except UnicodeEncodeError:
        return False
    else:
        return True

class KeyEvent:
    '''Key event class used to make the checking of details of the key
    event easy
    '''
    def __init__(self, keyval: int, keycode: int, state: int) -> None:
        self.val = keyval
        self.code = keycode
        self.state = state
        self.name = IBus.keyval_name(self.val)
        self.unicode = IBus.keyval_to_unicode(self.val)
        self.shift = self.state & IBus.ModifierType.SHIFT_MASK != 0
        self.control = self.state & IBus.ModifierType.CONTROL_MASK != 0
        self.super = self.state & IBus.ModifierType.SUPER_MASK != 0
        # mod1: Usually Alt_L (0x40),  Alt_R (0x6c),  Meta_L (0xcd)
        self.mod1 = self.state & IBus.ModifierType.MOD1_MASK != 0
        # mod4: Usually Super_L (0xce),  Hyper_L (0xcf)
        self.mod4 = self.state & IBus.ModifierType.MOD4_MASK != 0
        self.release = self.state & IBus.ModifierType.RELEASE_MASK != 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KeyEvent):
            return NotImplemented
        return (self.val == other.val
                and self.code == other.code
                and self.state == other.state)

    def __str__(self) -> str:
        return (
            f'val={self.val} '
            f'code={self.code} '
            f'state=0x{self.state:08x} '
            f'name=“{self.name}” '
            f'unicode=“{self.unicode}” '
            f'shift={self.shift} '
            f'control={self.control} '
            f'super={self.super} '
            f'mod1={self.mod1} '
            f'mod4={self.mod4} '
            f'release={self.release}')

def keybinding_to_keyevent(keybinding: str) -> KeyEvent:
    '''Returns a key event object created from a key binding string.'''
    name = keybinding.split('+')[-1]
    keyval = IBus.keyval_from_name(name)
    state = 0
    if 'Shift+' in keybinding:
        state |= IBus.ModifierType.SHIFT_MASK
    if 'Control+' in keybinding:
        state |= IBus.ModifierType.CONTROL_MASK
    if 'Super+' in keybinding:
        state |= IBus.ModifierType.SUPER_MASK
    if 'Mod1+' in keybinding:
        state |= IBus.ModifierType.MOD1_MASK
    if 'Mod4+' in keybinding:
        state |= IBus.ModifierType.MOD4_MASK
    if 'Mod5+' in keybinding:
        state |= IBus.ModifierType.MOD5_MASK
    return KeyEvent(keyval, 0, state)

class HotKeys:
    '''Class to make checking whether a key matches a hotkey for a certain
    command easy
    '''
    def __init__(self, keybindings: Dict[str, List[str]]) -> None:
        self._hotkeys: Dict[str, List[Tuple[int, int]]] = {}
        for command in keybindings:
            for keybinding in keybindings[command]:
                key = keybinding_to_keyevent(keybinding)
                if key.val == IBus.KEY_VoidSymbol:
                    LOGGER.warning('Invalid keybinding “%s” for command %s',
                                   keybinding, command)
                    continue
                self._hotkeys.setdefault(command, []).append(
                    (key.val, key.state & KEYBINDING_STATE_MASK))

    def __contains__(self, command_key_tuple: Tuple[KeyEvent, str]) -> bool:
        if not isinstance(command_key_tuple, tuple):
            return False
        (key, command) = command_key_tuple
        if key.release:
            return False
        state = key.state & KEYBINDING_STATE_MASK
        return (key.val, state) in self._hotkeys.get(command, [])

    def __str__(self) -> str:
        return repr(self._hotkeys)

def key_to_event(
        key: KeyEvent,
        composing: bool,
        candidate_cap: int,
        cursor_pos: Optional[int] = None) -> Optional[Event]:
    '''Normalize a key event into an input event of the composer

    :param key: The key event from IBus
    :param composing: Whether a composition is open
    :param candidate_cap: The number of candidates which can be
                          selected with digit keys
    :param cursor_pos: The position of the lookup table cursor if the
                       user moved it, a space then selects that
                       candidate
    :return: The input event or None if the key is not for the composer
             and should be passed through
    '''
    if key.release or key.control or key.mod1 or key.super or key.mod4:
        return None
    if key.name in ('BackSpace',):
        return Event.backspace() if composing else None
    if key.name in ('Return', 'KP_Enter', 'ISO_Enter'):
        return Event.enter() if composing else None
    if key.name in ('Escape',):
        return Event.disable() if composing else None
    if key.name in ('space', 'KP_Space'):
        if not composing:
            return None
        if cursor_pos is not None:
            return Event.number_key(cursor_pos + 1)
        return Event.space()
    char = key.unicode
    if len(char) != 1 or not is_ascii(char) or not char.isprintable():
        return None
    if char.isalpha():
        return Event.letter(char)
    if char.isdigit():
        if not composing:
            return None
        number = int(char)
        if 1 <= number <= candidate_cap:
            return Event.number_key(number)
        # Not a valid selection, ends the composition like punctuation:
        return Event.punct(char)
    if char.isspace():
        return None
    return Event.punct(char)

if __name__ == "__main__":
    LOG_HANDLER = logging.StreamHandler(stream=sys.stderr)
    LOGGER.setLevel(logging.DEBUG)
    LOGGER.addHandler(LOG_HANDLER)
    import doctest
    (FAILED, ATTEMPTED) = doctest.testmod()
    sys.exit(FAILED)
