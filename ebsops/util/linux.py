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
ebsops.util.linux
=================
Linux utility functions
"""

import logging
import os
import shutil
from collections import namedtuple
from subprocess import Popen, PIPE, TimeoutExpired

from decorator import decorator


log = logging.getLogger(__name__)
CommandResult = namedtuple('CommandResult', 'success result')
Response = namedtuple('Response', ['command', 'std_err', 'std_out', 'status_code'])


def command(timeout=None):
    """
    decorator used to define shell commands to be executed via monitor_command
    decorated function should return a list representing the command to be executed
    """
    @decorator
    def _run(f, *args, **kwargs):
        _cmd = f(*args, **kwargs)
        assert _cmd is not None, "null command passed to @command decorator"
        return monitor_command(_cmd, timeout)
    return _run


def monitor_command(cmd, timeout=None):
    cmdStr = cmd
    if isinstance(cmd, list):
        cmdStr = " ".join(cmd)

    assert cmdStr, "empty command passed to monitor_command"

    log.debug('command: {0}'.format(cmdStr))

    try:
        proc = Popen(cmd, stdout=PIPE, stderr=PIPE, close_fds=True, shell=not isinstance(cmd, list),
                     universal_newlines=True, errors='replace')
    except OSError as e:
        log.debug('unable to execute {0}: {1}'.format(cmdStr, e))
        return CommandResult(False, Response(cmdStr, str(e), '', None))

    try:
        std_out, std_err = proc.communicate(timeout=timeout)
    except TimeoutExpired:
        proc.kill()
        std_out, std_err = proc.communicate()
        log.debug('command timed out after {0}s: {1}'.format(timeout, cmdStr))

    for line in std_out.splitlines():
        log.debug(line)
    for line in std_err.splitlines():
        log.debug(u'STDERR: {0}'.format(line))

    status_code = proc.returncode
    log.debug("status code: {0}".format(status_code))
    return CommandResult(status_code == 0, Response(cmdStr, std_err, std_out, status_code))


def which(cmd):
    """
    :return: absolute path of cmd if found on PATH, else cmd unchanged so the failure
             surfaces when it is executed
    """
    return shutil.which(cmd) or cmd


def device_prefix(device, prefixes):
    """
    :param device: device name, eg. /dev/xvdf
    :param prefixes: candidate prefixes in priority order, eg. ('/dev/sd', '/dev/xvd')
    :return: the first prefix device starts with, None if there is none
    """
    for prefix in prefixes:
        if device.startswith(prefix):
            return prefix
    return None


def node_exists(path):
    return os.path.exists(path)


def parent_device(path):
    """
    returns the device path follows to by resolving symbolic links.
    path is expected to exist.
    """
    if os.path.islink(path):
        target = os.path.realpath(path)
        log.debug('{0} is a symlink to {1}'.format(path, target))
        return target.strip()
    return path
