# -*- coding: utf-8 -*-

#
#
#  Copyright 2013 Netflix, Inc.
#
#     Licensed under the Apache License, Version 2.0 (the "License");
#     you may not use this file except in compliance with the License.
#     You may obtain a copy of the License at
#
#         http://www.apache.org/licenses/LICENSE-2.0
#
#     Unless required by applicable law or agreed to in writing, software
#     distributed under the License is distributed on an "AS IS" BASIS,
#     WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#     See the License for the specific language governing permissions and
#     limitations under the License.
#
#

"""
ebsops.plugins.base
===================
Base class(es) for plugin implementations
"""
import logging

from ebsops.config import Config


__all__ = ()
log = logging.getLogger(__name__)


class BasePlugin(object):
    """ Base class for plugins """
    _entry_point = None
    _name = None

    def __init__(self):
        if self._entry_point is None:
            raise AttributeError('Plugins must declare their entry point namespace in a _entry_point class attribute')
        if self._name is None:
            raise AttributeError('Plugins must declare their entry point name in a _name class attribute')
        self._config = None

    @property
    def entry_point(self):
        return self._entry_point

    @property
    def name(self):
        return self._name

    @property
    def full_name(self):
        return '{0}.{1}'.format(self.entry_point, self.name)

    def configure(self, config=None):
        """ Configure the plugin, falling back to the packaged defaults """
        log.debug("Configuring plugin {0} for entry point {1}".format(self.name, self.entry_point))
        self._config = config if config is not None else Config.from_defaults()
