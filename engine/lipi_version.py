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
Version and installation prefix of ibus-lipi
'''
import os
import sys

VERSION = '0.1.0'

def get_version() -> str:
    '''Returns the version of ibus-lipi'''
    return VERSION

def get_prefix() -> str:
    '''Returns the installation prefix

    IBUS_LIPI_PREFIX overrides the prefix of the running Python
    interpreter.
    '''
    return os.getenv('IBUS_LIPI_PREFIX') or sys.prefix
