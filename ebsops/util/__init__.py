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
ebsops.util
===========
Utilities
"""
import logging
from time import monotonic, sleep

from decorator import decorator

from ebsops.exceptions import StateTransitionTimeout


log = logging.getLogger(__name__)


def retry_with_timeout(ExceptionToCheck=Exception, timeout=60, interval=1, logger=None):
    """
    Retries a function or method until it returns without raising ExceptionToCheck
    or timeout seconds have elapsed.

    The decorated function signals "not yet" by raising ExceptionToCheck; any other
    exception propagates immediately. Once the deadline passes the last ExceptionToCheck
    is wrapped in a StateTransitionTimeout. The function is always called at least once.

        @retry_with_timeout(VolumeNotReady, timeout=300, interval=5)
        def _available():
            ...
    """
    if logger is None:
        logger = log

    @decorator
    def _retry(f, *args, **kwargs):
        deadline = monotonic() + timeout
        while True:
            try:
                return f(*args, **kwargs)
            except ExceptionToCheck as e:
                logger.debug(e)
                if monotonic() >= deadline:
                    raise StateTransitionTimeout('timed out after {0}s: {1}'.format(timeout, e))
                sleep(interval)
    return _retry
