# -*- coding: utf-8 -*-
# vim:et sw=4 sts=4 sw=4
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
LipiEngine Factory
'''
from typing import Dict
from typing import Sequence
from typing import Tuple
import re
import os
import logging
from gi import require_version # type: ignore
# pylint: disable=wrong-import-position
require_version('IBus', '1.0')
from gi.repository import IBus # type: ignore
# pylint: enable=wrong-import-position
import lipi_engine
from lipi_dictionary import Index, load_dictionary_files

LOGGER = logging.getLogger('ibus-lipi')

DEBUG_LEVEL = int(0)

class EngineFactory(IBus.Factory): # type: ignore
    """Lipi IM Engine Factory"""
    def __init__(self, bus: IBus.Bus) -> None:
        global DEBUG_LEVEL # pylint: disable=global-statement
        try:
            DEBUG_LEVEL = int(str(os.getenv('IBUS_LIPI_DEBUG_LEVEL')))
        except (TypeError, ValueError):
            DEBUG_LEVEL = int(0)
        if DEBUG_LEVEL > 1:
            LOGGER.debug('EngineFactory.__init__(bus=%s)\n', bus)
        self.index_dict: Dict[Tuple[str, ...], Index] = {}
        self.enginedict: Dict[str, lipi_engine.LipiEngine] = {}
        self.bus = bus
        super().__init__(
            connection=bus.get_connection(), object_path=IBus.PATH_FACTORY)
        self.engine_id = 0

    def get_index(self, paths: Sequence[str]) -> Index:
        '''Returns the index for the dictionary files, loading them only
        once for all engines'''
        key = tuple(paths)
        if key not in self.index_dict:
            self.index_dict[key] = load_dictionary_files(paths)
        return self.index_dict[key]

    def do_create_engine( # pylint: disable=arguments-differ
            self, engine_name: str) -> lipi_engine.LipiEngine:
        if DEBUG_LEVEL > 1:
            LOGGER.debug(
                'EngineFactory.do_create_engine(engine_name=%s)\n',
                engine_name)
        engine_base_path = "/org/freedesktop/IBus/engines/lipi/%s/engine/"
        engine_path = engine_base_path % re.sub(
            r'[^a-zA-Z0-9_/]', '_', engine_name)
        try:
            if engine_name in self.enginedict:
                engine = self.enginedict[engine_name]
            else:
                engine = lipi_engine.LipiEngine(
                    self.bus,
                    engine_path + str(self.engine_id),
                    dictionary_loader=self.get_index)
                self.enginedict[engine_name] = engine
                self.engine_id += 1
            return engine
        except Exception as error:
            LOGGER.exception(
                'Failed to create engine %s: %s: %s',
                engine_name, error.__class__.__name__, error)
            raise Exception from error

    def do_destroy(self) -> None:  # pylint: disable=arguments-differ
        '''Destructor, which finish some task for IME'''
        LOGGER.info('Destroying %s engine(s)', len(self.enginedict))
        self.enginedict = {}
        self.index_dict = {}
        super().destroy()
