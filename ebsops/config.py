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
ebsops.config
=============
ebsops configuration and logging setup
"""
import logging
import os
from copy import deepcopy
from importlib import resources
from logging.config import dictConfig

import yaml
from munch import Munch, munchify

try:
    from yaml import CSafeLoader as Loader  # pylint: disable=redefined-outer-name
except ImportError:
    from yaml import SafeLoader as Loader

import ebsops
from ebsops.exceptions import ConfigException


__all__ = ('Config', 'LoggingConfig', 'init_defaults')
log = logging.getLogger(__name__)

RSRC_PKG = 'ebsops'
RSRC_DEFAULT_CONF_DIR = 'default_conf'
RSRC_DEFAULT_CONFS = {
    'main': os.path.join(RSRC_DEFAULT_CONF_DIR, 'ebsops.yml'),
    'logging': os.path.join(RSRC_DEFAULT_CONF_DIR, 'logging.yml'),
}


def init_defaults(debug=False):
    """
    Loads packaged defaults, merges any user config files on top of them and applies
    the resulting logging configuration.

    :rtype: Config
    """
    config = Config.from_defaults()
    config = config.dict_merge(config, Config.from_files(config.config_files.main, config.config_root))
    config.logging = LoggingConfig.from_defaults()
    config.logging = config.dict_merge(config.logging, LoggingConfig.from_files(config.config_files.logging,
                                                                                 config.config_root))

    if config.logging.base.enabled:
        dictConfig(config.logging.base.config.toDict())
    if debug:
        logging.getLogger().setLevel(logging.DEBUG)
        for handler in logging.getLogger().handlers:
            handler.setLevel(logging.DEBUG)

    log.debug('ebsops {0} default configuration loaded'.format(ebsops.__version__))
    return config


class Config(Munch):
    """ Base config class """
    resource_package = RSRC_PKG
    resource_default = RSRC_DEFAULT_CONFS['main']

    @classmethod
    def from_yaml(cls, yaml_data):
        try:
            data = yaml.load(yaml_data, Loader=Loader)
        except yaml.YAMLError as e:
            raise ConfigException('unable to parse configuration: {0}'.format(e))
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigException('configuration must be a mapping, got {0}'.format(type(data).__name__))
        return munchify(data, factory=cls)

    @classmethod
    def from_pkg_resource(cls, namespace, name):
        config = resources.files(namespace).joinpath(name).read_text()
        if len(config):
            return cls.from_yaml(config)
        log.warning('Resource for {0}.{1} is empty, returning empty config'.format(namespace, name))
        return cls()

    @classmethod
    def from_file(cls, yaml_file):
        if not os.path.exists(yaml_file):
            log.warning('File {0} not found, returning empty config'.format(yaml_file))
            return cls()
        with open(yaml_file) as f:
            _config = cls.from_yaml(f)
        return _config

    @classmethod
    def from_files(cls, files, config_root=""):
        _files = [os.path.expanduser(filename) for filename in files]
        _files = [(x if x.startswith('/') else os.path.join(config_root, x)) for x in _files]
        _files = [filename for filename in _files if os.path.exists(filename)]
        _config = cls()
        for filename in _files:
            log.debug('Merging configuration from {0}'.format(filename))
            _new = cls.from_file(filename)
            _config = cls.dict_merge(_config, _new)
        return _config

    @classmethod
    def from_defaults(cls):
        if not (cls.resource_package and cls.resource_default):
            log.warning('No class resource attributes, returning empty config')
            return cls()
        return cls.from_pkg_resource(cls.resource_package, cls.resource_default)

    @staticmethod
    def dict_merge(old, new):
        res = deepcopy(old)
        for k, v in new.items():
            if k in res and isinstance(res[k], dict) and isinstance(v, dict):
                res[k] = Config.dict_merge(res[k], v)
            else:
                res[k] = deepcopy(v)
        return res


class LoggingConfig(Config):
    """ Logging config class """
    resource_default = RSRC_DEFAULT_CONFS['logging']
