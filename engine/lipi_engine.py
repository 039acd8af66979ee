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
The IBus engine of ibus-lipi

Turns IBus key events into composer events and shows the effects of
the composer in the preedit and the lookup table.
'''

from typing import Any
from typing import Callable
from typing import Dict
from typing import List
from typing import Optional
from typing import Sequence
from typing import Union
import logging
import threading
# pylint: disable=wrong-import-position
from gi import require_version # type: ignore
require_version('IBus', '1.0')
from gi.repository import IBus # type: ignore
require_version('Gio', '2.0')
from gi.repository import Gio # type: ignore
require_version('GLib', '2.0')
from gi.repository import GLib # type: ignore
# pylint: enable=wrong-import-position

import lipi_util
import lipi_version
from lipi_dictionary import Index, load_dictionary_files
from lipi_composition import Composer, ComposerConfig, Effects, Event

LOGGER = logging.getLogger('ibus-lipi')

SCHEMA_ID = 'org.freedesktop.ibus.engine.lipi'
SCHEMA_PATH = '/org/freedesktop/ibus/engine/lipi/'

MODE_ON_SYMBOL = 'অ'
MODE_OFF_SYMBOL = 'A'

CURSOR_KEYS = ('Up', 'Down', 'KP_Up', 'KP_Down',
               'Page_Up', 'Page_Down', 'KP_Page_Up', 'KP_Page_Down')

class LipiEngine(IBus.Engine): # type: ignore
    '''The IBus Engine for ibus-lipi'''

    def __init__(
            self,
            bus: IBus.Bus,
            obj_path: str,
            dictionary_loader: Optional[
                Callable[[Sequence[str]], Index]] = None,
            gsettings: Optional[Any] = None,
            unit_test: bool = False) -> None:
        '''
        :param bus: The IBus bus
        :param obj_path: The D-Bus object path of this engine
        :param dictionary_loader: Builds the index from a list of
                                  dictionary files. The factory passes
                                  a caching loader to share the index
                                  between engines.
        :param gsettings: The settings object, a Gio.Settings for
                          the ibus-lipi schema if None
        :param unit_test: Whether the engine runs in the unit tests
        '''
        LOGGER.info(
            'LipiEngine.__init__(bus=%s, obj_path=%s, unit_test=%s)',
            bus, obj_path, unit_test)
        super().__init__(
            connection=bus.get_connection(),
            object_path=obj_path)
        self._unit_test = unit_test
        self._bus = bus
        if dictionary_loader is None:
            dictionary_loader = load_dictionary_files
        self._dictionary_loader = dictionary_loader
        if gsettings is None:
            gsettings = Gio.Settings(schema=SCHEMA_ID, path=SCHEMA_PATH)
        self._gsettings = gsettings
        self._settings_dict = self._init_settings_dict()

        self._debug_level: int = self._settings_dict['debuglevel']['user']
        self._debug_level = max(self._debug_level, 0)
        LOGGER.info('self._debug_level=%s', self._debug_level)

        self._candidate_cap: int = self._settings_dict[
            'candidatecap']['user']
        self._candidate_cap = max(self._candidate_cap, 1)
        self._candidate_cap = min(self._candidate_cap, 9)

        self._sentence_matching: bool = self._settings_dict[
            'sentencematching']['user']

        self._smart_quoting: bool = self._settings_dict[
            'smartquoting']['user']

        self._remap_punctuation_when_idle: bool = self._settings_dict[
            'remappunctuationwhenidle']['user']

        self._dictionaries: List[str] = list(
            self._settings_dict['dictionaries']['user'])

        self._lookup_table_orientation: int = self._settings_dict[
            'lookuptableorientation']['user']

        self._preedit_underline: int = self._settings_dict[
            'preeditunderline']['user']

        self._show_word_boundaries: bool = self._settings_dict[
            'showwordboundaries']['user']

        self._input_mode: bool = self._settings_dict['inputmode']['user']

        self._toggle_input_mode_keybindings: List[str] = list(
            self._settings_dict['toggleinputmode']['user'])
        self._hotkeys = lipi_util.HotKeys(
            {'toggle_input_mode_on_off': self._toggle_input_mode_keybindings})

        # Shared by the key event path and the focus/lifecycle path:
        self._lock = threading.Lock()

        self._lookup_table: IBus.LookupTable = IBus.LookupTable()
        self._lookup_table.clear()
        self._lookup_table.set_page_size(self._candidate_cap)
        self._lookup_table.set_orientation(self._lookup_table_orientation)
        self._lookup_table.set_cursor_visible(False)
        self._lookup_table.set_round(False)
        for index in range(0, 9):
            self._lookup_table.set_label(
                index, IBus.Text.new_from_string(str(index + 1)))
        # Whether the user moved the lookup table cursor since the
        # candidates were last shown:
        self._cursor_moved = False
        self._current_preedit_text = ''

        self._composer = self._new_composer()

        self.input_mode_properties = {
            'InputMode.Off': {
                'number': 0,
                'symbol': MODE_OFF_SYMBOL,
                'label': 'Off',
            },
            'InputMode.On': {
                'number': 1,
                'symbol': MODE_ON_SYMBOL,
                'label': 'On',
            }
        }
        self.input_mode_menu: Dict[str, Any] = {
            'key': 'InputMode',
            'label': 'Input mode',
            'tooltip': 'Here you can switch ibus-lipi on or off.',
            'sub_properties': self.input_mode_properties
        }
        self._prop_dict: Dict[str, IBus.Property] = {}
        self._sub_props_dict: Dict[str, IBus.PropList] = {}
        self.main_prop_list = IBus.PropList()
        self._init_properties()

        self._gsettings.connect('changed', self._on_gsettings_value_changed)
        LOGGER.info(
            '*** ibus-lipi %s initialized, ready for input: ***',
            lipi_version.get_version())

    def _init_settings_dict(self) -> Dict[str, Any]:
        '''Initialize a dictionary with the default and user settings for all
        settings keys.

        Keeping a copy of the default settings in the settings dictionary
        makes it easy to revert some or all settings to the defaults.
        '''
        settings_dict: Dict[str, Any] = {}
        set_get_functions: Dict[str, Dict[str, Any]] = {
            'candidatecap': {
                'set': self.set_candidate_cap,
                'get': self.get_candidate_cap},
            'sentencematching': {
                'set': self.set_sentence_matching,
                'get': self.get_sentence_matching},
            'smartquoting': {
                'set': self.set_smart_quoting,
                'get': self.get_smart_quoting},
            'remappunctuationwhenidle': {
                'set': self.set_remap_punctuation_when_idle,
                'get': self.get_remap_punctuation_when_idle},
            'dictionaries': {
                'set': self.set_dictionaries,
                'get': self.get_dictionaries},
            'lookuptableorientation': {
                'set': self.set_lookup_table_orientation,
                'get': self.get_lookup_table_orientation},
            'preeditunderline': {
                'set': self.set_preedit_underline,
                'get': self.get_preedit_underline},
            'showwordboundaries': {
                'set': self.set_show_word_boundaries,
                'get': self.get_show_word_boundaries},
            'inputmode': {
                'set': self.set_input_mode,
                'get': self.get_input_mode},
            'toggleinputmode': {
                'set': self.set_toggle_input_mode_keybindings,
                'get': self.get_toggle_input_mode_keybindings},
            'debuglevel': {
                'set': self.set_debug_level,
                'get': self.get_debug_level},
        }
        for key, functions in set_get_functions.items():
            default_value = lipi_util.variant_to_value(
                self._gsettings.get_default_value(key))
            user_value = lipi_util.variant_to_value(
                self._gsettings.get_user_value(key))
            if user_value is None:
                user_value = default_value
            settings_dict[key] = {
                'default': default_value,
                'user': user_value,
                'set_function': functions['set'],
                'get_function': functions['get'],
            }
        return settings_dict

    def _dictionary_paths(self) -> List[str]:
        if self._dictionaries:
            return list(self._dictionaries)
        return lipi_util.default_dictionary_paths()

    def _new_composer(self) -> Composer:
        '''Load the dictionaries and create a composer for the current
        settings'''
        paths = self._dictionary_paths()
        LOGGER.info('Loading dictionaries %s', paths)
        index = self._dictionary_loader(paths)
        LOGGER.info('Dictionary index has %s spellings', len(index))
        config = ComposerConfig(
            candidate_cap=self._candidate_cap,
            sentence_matching=self._sentence_matching,
            smart_quoting=self._smart_quoting,
            remap_punctuation_when_idle=self._remap_punctuation_when_idle)
        return Composer(index, config=config, lock=self._lock)

    def _rebuild_composer(self) -> None:
        '''Replace the composer after a setting it depends on changed

        An open composition is committed verbatim first.
        '''
        if self._composer.is_composing():
            self._process_event(Event.disable())
        self._composer = self._new_composer()
        self._lookup_table.set_page_size(self._candidate_cap)

    def get_composer(self) -> Composer:
        '''Returns the composition state machine of this engine'''
        return self._composer

    def get_lookup_table(self) -> IBus.LookupTable:
        '''Returns the lookup table of this engine'''
        return self._lookup_table

    def _process_event(self, event: Event) -> bool:
        '''Run event through the composer and apply the effects

        :return: True if the event was consumed
        '''
        effects = self._composer.process_event(event)
        if effects is None:
            return False
        self._apply_effects(effects)
        return effects.consumed

    def _try_process_event(self, event: Event) -> None:
        '''Like _process_event() but gives up if the lock is busy'''
        effects = self._composer.try_process_event(event)
        if effects is None:
            return
        self._apply_effects(effects)

    def _apply_effects(self, effects: Effects) -> None:
        if self._debug_level > 1:
            LOGGER.debug('effects=%s', effects)
        if effects.ended or effects.commit_text is not None:
            self._update_preedit('', ())
        if effects.commit_text:
            super().commit_text(
                IBus.Text.new_from_string(effects.commit_text))
        if effects.ended:
            self._update_lookup_table([])
            return
        if effects.updated:
            self._update_lookup_table(effects.candidates)
            self._update_preedit(
                effects.display_text, effects.word_boundaries)

    def _update_preedit(
            self, text: str, word_boundaries: Sequence[int]) -> None:
        '''Update the preedit string in the UI

        :param text: The text of the composition
        :param word_boundaries: Offsets into text where the words of the
                                first suggestion end
        '''
        if self._debug_level > 2:
            LOGGER.debug('text=“%s” word_boundaries=%s',
                         text, word_boundaries)
        if text == '':
            if self._current_preedit_text == '':
                if self._debug_level > 1:
                    LOGGER.debug('Avoid clearing already empty preedit.')
                return
            self._current_preedit_text = ''
            self.update_preedit_text_with_mode(
                IBus.Text.new_from_string(''), 0, False,
                IBus.PreeditFocusMode.COMMIT)
            return
        attrs = IBus.AttrList()
        start = len(self._composer.get_selected())
        if (self._show_word_boundaries
                and word_boundaries
                and self._preedit_underline != IBus.AttrUnderline.NONE):
            if start > 0:
                attrs.append(IBus.attr_underline_new(
                    self._preedit_underline, 0, start))
            for number, end in enumerate(word_boundaries):
                if number % 2:
                    underline = IBus.AttrUnderline.DOUBLE
                else:
                    underline = IBus.AttrUnderline.SINGLE
                attrs.append(IBus.attr_underline_new(underline, start, end))
                start = end
            if start < len(text):
                attrs.append(IBus.attr_underline_new(
                    self._preedit_underline, start, len(text)))
        else:
            attrs.append(IBus.attr_underline_new(
                self._preedit_underline, 0, len(text)))
        ibus_text = IBus.Text.new_from_string(text)
        ibus_text.set_attributes(attrs)
        self._current_preedit_text = text
        self.update_preedit_text_with_mode(
            ibus_text, len(text), True, IBus.PreeditFocusMode.COMMIT)

    def _update_lookup_table(self, candidates: List[Any]) -> None:
        '''Fill the lookup table with candidates

        Show it if it is not empty, otherwise hide it.

        :param candidates: (index, output) pairs
        '''
        self._lookup_table.clear()
        self._lookup_table.set_cursor_visible(False)
        self._cursor_moved = False
        # An empty lookup table would still pop up in some desktops:
        if not candidates:
            self.hide_lookup_table()
            return
        for _index, output in candidates:
            self._lookup_table.append_candidate(
                IBus.Text.new_from_string(output))
        self.update_lookup_table(self._lookup_table, True)

    def _move_cursor(self, key_name: str) -> bool:
        '''Move the lookup table cursor'''
        if self._lookup_table.get_number_of_candidates() == 0:
            return False
        if key_name in ('Up', 'KP_Up'):
            self._lookup_table.cursor_up()
        elif key_name in ('Down', 'KP_Down'):
            self._lookup_table.cursor_down()
        elif key_name in ('Page_Up', 'KP_Page_Up'):
            self._lookup_table.page_up()
        else:
            self._lookup_table.page_down()
        self._lookup_table.set_cursor_visible(True)
        self._cursor_moved = True
        self.update_lookup_table(self._lookup_table, True)
        return True

    def _init_or_update_property_menu(
            self,
            menu: Dict[str, Any],
            current_mode: int = 0) -> None:
        '''
        Initialize or update a ibus property menu
        '''
        menu_key = menu['key']
        sub_properties_dict = menu['sub_properties']
        symbol = ''
        for prop in sub_properties_dict:
            if sub_properties_dict[prop]['number'] == int(current_mode):
                symbol = sub_properties_dict[prop]['symbol']
        label = menu['label']
        tooltip = (f'{menu["tooltip"]}\n'
                   f'{repr(self._toggle_input_mode_keybindings)}')
        self._init_or_update_sub_properties(
            menu_key, sub_properties_dict, current_mode=current_mode)
        if menu_key not in self._prop_dict: # initialize property
            self._prop_dict[menu_key] = IBus.Property(
                key=menu_key,
                prop_type=IBus.PropType.MENU,
                label=IBus.Text.new_from_string(label),
                icon='',
                symbol=IBus.Text.new_from_string(symbol),
                tooltip=IBus.Text.new_from_string(tooltip),
                sensitive=True,
                visible=True,
                state=IBus.PropState.UNCHECKED,
                sub_props=self._sub_props_dict[menu_key])
            self.main_prop_list.append(self._prop_dict[menu_key])
        else: # update the property
            self._prop_dict[menu_key].set_symbol(
                IBus.Text.new_from_string(symbol))
            self._prop_dict[menu_key].set_tooltip(
                IBus.Text.new_from_string(tooltip))
            self.update_property(self._prop_dict[menu_key]) # important!

    def _init_or_update_sub_properties(
            self,
            menu_key: str,
            modes: Dict[str, Any],
            current_mode: int = 0) -> None:
        '''
        Initialize or update the sub-properties of a property menu entry.
        '''
        if menu_key not in self._sub_props_dict:
            update = False
            self._sub_props_dict[menu_key] = IBus.PropList()
        else:
            update = True
        for mode in sorted(modes, key=lambda x: (int(modes[x]['number']))):
            if modes[mode]['number'] == int(current_mode):
                state = IBus.PropState.CHECKED
            else:
                state = IBus.PropState.UNCHECKED
            if not update: # initialize property
                self._prop_dict[mode] = IBus.Property(
                    key=mode,
                    prop_type=IBus.PropType.RADIO,
                    label=IBus.Text.new_from_string(modes[mode]['label']),
                    icon='',
                    tooltip=IBus.Text.new_from_string(''),
                    sensitive=True,
                    visible=True,
                    state=state,
                    sub_props=None)
                self._sub_props_dict[menu_key].append(
                    self._prop_dict[mode])
            else: # update property
                self._prop_dict[mode].set_state(state)
                self.update_property(self._prop_dict[mode]) # important!

    def _init_properties(self) -> None:
        '''
        Initialize the ibus property menus
        '''
        self._init_or_update_property_menu(
            self.input_mode_menu, int(self._input_mode))
        self.register_properties(self.main_prop_list)

    def do_property_activate( # pylint: disable=arguments-differ
            self,
            ibus_property: str,
            prop_state: IBus.PropState = IBus.PropState.UNCHECKED) -> None:
        '''
        Handle clicks on properties
        '''
        if self._debug_level > 1:
            LOGGER.debug(
                'ibus_property=%s prop_state=%s', ibus_property, prop_state)
        if prop_state != IBus.PropState.CHECKED:
            # If the mouse just hovered over a menu button and
            # no sub-menu entry was clicked, there is nothing to do:
            return
        if ibus_property in self.input_mode_properties:
            self.set_input_mode(
                bool(self.input_mode_properties[ibus_property]['number']))

    def do_process_key_event( # pylint: disable=arguments-differ
            self, keyval: int, keycode: int, state: int) -> bool:
        '''Process Key Events
        Key Events include Key Press and Key Release,
        modifier means Key Pressed
        '''
        key = lipi_util.KeyEvent(keyval, keycode, state)
        if self._debug_level > 1:
            LOGGER.debug('KeyEvent object: %s', key)

        if (key, 'toggle_input_mode_on_off') in self._hotkeys:
            self.toggle_input_mode()
            return True

        if not self._input_mode:
            if self._debug_level > 0:
                LOGGER.debug('Direct input mode')
            return False

        composing = self._composer.is_composing()
        if composing and not key.release and key.name in CURSOR_KEYS:
            return self._move_cursor(key.name)

        cursor_pos: Optional[int] = None
        if self._cursor_moved:
            cursor_pos = self._lookup_table.get_cursor_pos()
        event = lipi_util.key_to_event(
            key, composing, self._candidate_cap, cursor_pos)
        if event is None:
            return False
        if self._debug_level > 1:
            LOGGER.debug('event=%s', event)
        return self._process_event(event)

    def do_candidate_clicked( # pylint: disable=arguments-differ
            self, index: int, button: int, state: int) -> None:
        '''Called when a candidate in the lookup table
        is clicked with the mouse
        '''
        if self._debug_level > 1:
            LOGGER.debug(
                'index = %s button = %s state = %s\n', index, button, state)
        if button != 1 or not self._composer.is_composing():
            return
        self._process_event(Event.number_key(index + 1))

    def do_focus_in(self) -> None: # pylint: disable=arguments-differ
        '''Called when a window gets focus while this input engine is
        enabled'''
        if self._debug_level > 1:
            LOGGER.debug('entering do_focus_in()\n')
        self.register_properties(self.main_prop_list)

    def do_focus_out(self) -> None: # pylint: disable=arguments-differ
        '''Called when a window loses focus while this input engine is
        enabled'''
        if self._debug_level > 1:
            LOGGER.debug('entering do_focus_out()\n')
        self._try_process_event(Event.focus_lost())

    def do_focus_out_id( # pylint: disable=arguments-differ
            self, object_path: str) -> None:
        '''Called for ibus >= 1.5.27 when a window loses focus while
        this input engine is enabled

        :param object_path: Example:
                            '/org/freedesktop/IBus/InputContext_23'
        '''
        if self._debug_level > 1:
            LOGGER.debug('object_path=%s\n', object_path)
        self._try_process_event(Event.focus_lost())

    def do_reset(self) -> None: # pylint: disable=arguments-differ
        '''Called when the mouse pointer is used to move to cursor to a
        different position in the current window.
        '''
        if self._debug_level > 1:
            LOGGER.debug('do_reset()\n')
        self._try_process_event(Event.focus_lost())

    def do_enable(self) -> None: # pylint: disable=arguments-differ
        '''Called when this input engine is enabled'''
        if self._debug_level > 1:
            LOGGER.debug('do_enable()\n')
        self.do_focus_in()

    def do_disable(self) -> None: # pylint: disable=arguments-differ
        '''Called when this input engine is disabled'''
        if self._debug_level > 1:
            LOGGER.debug('do_disable()\n')
        self._process_event(Event.disable())

    def do_page_up(self) -> bool: # pylint: disable=arguments-differ
        '''Called when the page up button in the lookup table is clicked with
        the mouse
        '''
        return self._move_cursor('Page_Up')

    def do_page_down(self) -> bool: # pylint: disable=arguments-differ
        '''Called when the page down button in the lookup table is clicked
        with the mouse
        '''
        return self._move_cursor('Page_Down')

    def do_cursor_up(self) -> bool: # pylint: disable=arguments-differ
        '''Called when the mouse wheel is rolled up in the candidate area of
        the lookup table
        '''
        return self._move_cursor('Up')

    def do_cursor_down(self) -> bool: # pylint: disable=arguments-differ
        '''Called when the mouse wheel is rolled down in the candidate area
        of the lookup table
        '''
        return self._move_cursor('Down')

    def set_candidate_cap(
            self,
            candidate_cap: Union[int, Any],
            update_gsettings: bool = True) -> None:
        '''Sets the maximum number of candidates

        :param candidate_cap: The maximum number of candidates
                              1 <= candidate_cap <= 9
        :param update_gsettings: Whether to write the change to Gsettings.
                                 Set this to False if this method is
                                 called because the Gsettings key changed
                                 to avoid endless loops when the Gsettings
                                 key is changed twice in a short time.
        '''
        if self._debug_level > 1:
            LOGGER.debug(
                '(%s, update_gsettings = %s)', candidate_cap, update_gsettings)
        if candidate_cap == self._candidate_cap:
            return
        if 1 <= candidate_cap <= 9:
            self._candidate_cap = candidate_cap
            self._rebuild_composer()
            if update_gsettings:
                self._gsettings.set_value(
                    'candidatecap',
                    GLib.Variant.new_int32(candidate_cap))

    def get_candidate_cap(self) -> int:
        '''Returns the maximum number of candidates'''
        return self._candidate_cap

    def set_sentence_matching(
            self, mode: Union[bool, Any], update_gsettings: bool = True) -> None:
        '''Sets whether multi-word suggestions are computed

        :param mode: Whether to match sentences
        :param update_gsettings: Whether to write the change to Gsettings.
        '''
        if self._debug_level > 1:
            LOGGER.debug('(%s, update_gsettings = %s)', mode, update_gsettings)
        if mode == self._sentence_matching:
            return
        self._sentence_matching = mode
        self._rebuild_composer()
        if update_gsettings:
            self._gsettings.set_value(
                'sentencematching',
                GLib.Variant.new_boolean(mode))

    def get_sentence_matching(self) -> bool:
        '''Returns whether multi-word suggestions are computed'''
        return self._sentence_matching

    def set_smart_quoting(
            self, mode: Union[bool, Any], update_gsettings: bool = True) -> None:
        '''Sets whether quotes alternate between opening and closing forms

        :param mode: Whether to use smart quotes
        :param update_gsettings: Whether to write the change to Gsettings.
        '''
        if self._debug_level > 1:
            LOGGER.debug('(%s, update_gsettings = %s)', mode, update_gsettings)
        if mode == self._smart_quoting:
            return
        self._smart_quoting = mode
        self._rebuild_composer()
        if update_gsettings:
            self._gsettings.set_value(
                'smartquoting',
                GLib.Variant.new_boolean(mode))

    def get_smart_quoting(self) -> bool:
        '''Returns whether smart quotes are used'''
        return self._smart_quoting

    def set_remap_punctuation_when_idle(
            self, mode: Union[bool, Any], update_gsettings: bool = True) -> None:
        '''Sets whether punctuation typed outside of a composition is
        remapped

        :param mode: Whether to remap punctuation when idle
        :param update_gsettings: Whether to write the change to Gsettings.
        '''
        if self._debug_level > 1:
            LOGGER.debug('(%s, update_gsettings = %s)', mode, update_gsettings)
        if mode == self._remap_punctuation_when_idle:
            return
        self._remap_punctuation_when_idle = mode
        self._rebuild_composer()
        if update_gsettings:
            self._gsettings.set_value(
                'remappunctuationwhenidle',
                GLib.Variant.new_boolean(mode))

    def get_remap_punctuation_when_idle(self) -> bool:
        '''Returns whether punctuation is remapped when idle'''
        return self._remap_punctuation_when_idle

    def set_dictionaries(
            self,
            dictionaries: Union[List[str], Any],
            update_gsettings: bool = True) -> None:
        '''Sets the dictionary files to use

        :param dictionaries: List of paths of dictionary files. An empty
                             list selects the bundled dictionary and the
                             user dictionary.
        :param update_gsettings: Whether to write the change to Gsettings.
        '''
        if self._debug_level > 1:
            LOGGER.debug(
                '(%s, update_gsettings = %s)', dictionaries, update_gsettings)
        dictionaries = list(dictionaries)
        if dictionaries == self._dictionaries:
            return
        self._dictionaries = dictionaries
        self._rebuild_composer()
        if update_gsettings:
            self._gsettings.set_value(
                'dictionaries',
                GLib.Variant.new_strv(dictionaries))

    def get_dictionaries(self) -> List[str]:
        '''Returns the configured dictionary files'''
        return list(self._dictionaries)

    def set_lookup_table_orientation(
            self,
            orientation: Union[int, Any],
            update_gsettings: bool = True) -> None:
        '''Sets the orientation of the lookup table

        :param orientation: The orientation of the lookup table
                            0 <= orientation <= 2
                            IBUS_ORIENTATION_HORIZONTAL = 0,
                            IBUS_ORIENTATION_VERTICAL   = 1,
                            IBUS_ORIENTATION_SYSTEM     = 2.
        :param update_gsettings: Whether to write the change to Gsettings.
        '''
        if self._debug_level > 1:
            LOGGER.debug(
                '(%s, update_gsettings = %s)', orientation, update_gsettings)
        if orientation == self._lookup_table_orientation:
            return
        if 0 <= orientation <= 2:
            self._lookup_table_orientation = orientation
            self._lookup_table.set_orientation(self._lookup_table_orientation)
            if update_gsettings:
                self._gsettings.set_value(
                    'lookuptableorientation',
                    GLib.Variant.new_int32(orientation))

    def get_lookup_table_orientation(self) -> int:
        '''Returns the current orientation of the lookup table'''
        return self._lookup_table_orientation

    def set_preedit_underline(
            self,
            underline_mode: Union[int, Any],
            update_gsettings: bool = True) -> None:
        '''Sets the underline style for the preedit

        :param underline_mode: The underline mode to be used for the preedit
                              0 <= underline_mode <= 3
                              IBus.AttrUnderline.NONE    = 0,
                              IBus.AttrUnderline.SINGLE  = 1,
                              IBus.AttrUnderline.DOUBLE  = 2,
                              IBus.AttrUnderline.LOW     = 3,
        :param update_gsettings: Whether to write the change to Gsettings.
        '''
        if self._debug_level > 1:
            LOGGER.debug(
                '(%s, update_gsettings = %s)',
                underline_mode, update_gsettings)
        if underline_mode == self._preedit_underline:
            return
        if 0 <= underline_mode < IBus.AttrUnderline.ERROR:
            self._preedit_underline = underline_mode
            self._refresh()
            if update_gsettings:
                self._gsettings.set_value(
                    'preeditunderline',
                    GLib.Variant.new_int32(underline_mode))

    def get_preedit_underline(self) -> int:
        '''Returns the current underline style of the preedit'''
        return self._preedit_underline

    def set_show_word_boundaries(
            self, mode: Union[bool, Any], update_gsettings: bool = True) -> None:
        '''Sets whether the words of the first suggestion are marked in
        the preedit by alternating underlines

        :param mode: Whether to show word boundaries
        :param update_gsettings: Whether to write the change to Gsettings.
        '''
        if self._debug_level > 1:
            LOGGER.debug('(%s, update_gsettings = %s)', mode, update_gsettings)
        if mode == self._show_word_boundaries:
            return
        self._show_word_boundaries = mode
        self._refresh()
        if update_gsettings:
            self._gsettings.set_value(
                'showwordboundaries',
                GLib.Variant.new_boolean(mode))

    def get_show_word_boundaries(self) -> bool:
        '''Returns whether word boundaries are shown in the preedit'''
        return self._show_word_boundaries

    def set_input_mode(
            self, mode: Union[bool, Any], update_gsettings: bool = True) -> None:
        '''Sets the input mode

        :param mode: Whether to switch ibus-lipi on or off
        :param update_gsettings: Whether to write the change to Gsettings.
        '''
        if self._debug_level > 1:
            LOGGER.debug('(%s, update_gsettings = %s)', mode, update_gsettings)
        if mode == self._input_mode:
            return
        if not mode and self._composer.is_composing():
            # Switching off does not throw away the current input but
            # commits it:
            self._process_event(Event.disable())
        self._input_mode = mode
        self._init_or_update_property_menu(
            self.input_mode_menu, int(self._input_mode))
        if update_gsettings:
            self._gsettings.set_value(
                'inputmode',
                GLib.Variant.new_boolean(mode))

    def toggle_input_mode(self, update_gsettings: bool = True) -> None:
        '''Toggles whether ibus-lipi is on or off'''
        self.set_input_mode(not self._input_mode, update_gsettings)

    def get_input_mode(self) -> bool:
        '''Returns the current value of the input mode'''
        return self._input_mode

    def set_toggle_input_mode_keybindings(
            self,
            keybindings: Union[List[str], Any],
            update_gsettings: bool = True) -> None:
        '''Sets the key bindings which switch ibus-lipi on and off

        :param keybindings: List of key binding strings like
                            'Control+space'
        :param update_gsettings: Whether to write the change to Gsettings.
        '''
        if self._debug_level > 1:
            LOGGER.debug(
                '(%s, update_gsettings = %s)', keybindings, update_gsettings)
        keybindings = list(keybindings)
        if keybindings == self._toggle_input_mode_keybindings:
            return
        self._toggle_input_mode_keybindings = keybindings
        self._hotkeys = lipi_util.HotKeys(
            {'toggle_input_mode_on_off': keybindings})
        self._init_or_update_property_menu(
            self.input_mode_menu, int(self._input_mode))
        if update_gsettings:
            self._gsettings.set_value(
                'toggleinputmode',
                GLib.Variant.new_strv(keybindings))

    def get_toggle_input_mode_keybindings(self) -> List[str]:
        '''Returns the key bindings which switch ibus-lipi on and off'''
        return list(self._toggle_input_mode_keybindings)

    def set_debug_level(
            self,
            debug_level: Union[int, Any],
            update_gsettings: bool = True) -> None:
        '''Sets the debug level

        :param debug_level: The debug level
                            0 <= debug_level <= 255
        :param update_gsettings: Whether to write the change to Gsettings.
        '''
        if self._debug_level > 1:
            LOGGER.debug(
                '(%s, update_gsettings = %s)', debug_level, update_gsettings)
        if debug_level == self._debug_level:
            return
        if 0 <= debug_level <= 255:
            self._debug_level = debug_level
            if update_gsettings:
                self._gsettings.set_value(
                    'debuglevel',
                    GLib.Variant.new_int32(debug_level))

    def get_debug_level(self) -> int:
        '''Returns the current debug level'''
        return self._debug_level

    def _refresh(self) -> None:
        '''Redraw the current composition after a display setting changed'''
        self._apply_effects(self._composer.recompute())

    def _on_gsettings_value_changed(
            self, _settings: Gio.Settings, key: str) -> None:
        '''
        Called when a value in the settings has been changed.

        :param settings: The settings object
        :param key: The key of the setting which has changed
        '''
        value = lipi_util.variant_to_value(self._gsettings.get_value(key))
        LOGGER.debug('Settings changed: key=%s value=%s\n', key, value)
        if key in self._settings_dict:
            self._settings_dict[key]['set_function'](
                value, update_gsettings=False)
            return
        LOGGER.warning('Unknown key %s\n', key)
