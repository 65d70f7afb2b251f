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
ebsops.plugins.manager
======================
plugin lookup through setuptools entry points
"""
import logging

from stevedore.driver import DriverManager
from stevedore.exception import NoMatches

from ebsops.exceptions import ConfigException


__all__ = ('CloudPluginManager', 'load_cloud_plugin')
log = logging.getLogger(__name__)


class CloudPluginManager(DriverManager):
    """ loads a single storage provider plugin by name """
    _entry_point = 'ebsops.plugins.cloud'

    def __init__(self, name, invoke_on_load=True, invoke_args=None, invoke_kwds=None):
        invoke_args = invoke_args or ()
        invoke_kwds = invoke_kwds or {}
        super(CloudPluginManager, self).__init__(namespace=self.entry_point, name=name, invoke_on_load=invoke_on_load,
                                                 invoke_args=invoke_args, invoke_kwds=invoke_kwds)

    @property
    def entry_point(self):
        return self._entry_point


def load_cloud_plugin(name, **kwargs):
    """
    :param name: provider name, eg. aws
    :param kwargs: passed to the plugin's constructor
    :return: the plugin instance
    """
    log.debug('Loading cloud plugin {0}'.format(name))
    try:
        manager = CloudPluginManager(name, invoke_kwds=kwargs)
    except NoMatches:
        raise ConfigException('no storage provider plugin named {0!r}'.format(name))
    return manager.driver
