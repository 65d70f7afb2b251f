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
import pytest

from ebsops.exceptions import StateTransitionTimeout, StorageError
from ebsops.util import retry_with_timeout
from ebsops.util.linux import device_prefix, monitor_command, parent_device


class NotYet(Exception):
    pass


class TestRetryWithTimeout(object):

    def setup_method(self, method):
        self.calls = 0

    def test_returns_first_success(self):
        @retry_with_timeout(NotYet, timeout=5, interval=0)
        def ready():
            self.calls += 1
            if self.calls < 3:
                raise NotYet('attempt {0}'.format(self.calls))
            return 'ready'

        assert ready() == 'ready'
        assert self.calls == 3

    def test_times_out_with_last_error(self):
        @retry_with_timeout(NotYet, timeout=0, interval=0)
        def never():
            self.calls += 1
            raise NotYet('still creating')

        with pytest.raises(StateTransitionTimeout) as excinfo:
            never()
        assert self.calls == 1
        assert 'still creating' in str(excinfo.value)
        assert isinstance(excinfo.value, StorageError)

    def test_other_errors_propagate(self):
        @retry_with_timeout(NotYet, timeout=5, interval=0)
        def broken():
            self.calls += 1
            raise ValueError('bad request')

        with pytest.raises(ValueError):
            broken()
        assert self.calls == 1

    def test_arguments_pass_through(self):
        @retry_with_timeout(NotYet, timeout=1, interval=0)
        def add(a, b=2):
            return a + b

        assert add(1, b=3) == 4


class TestLinux(object):

    def test_monitor_command(self):
        result = monitor_command(['echo', 'hello'])

        assert result.success
        assert result.result.std_out.strip() == 'hello'
        assert result.result.status_code == 0
        assert result.result.command == 'echo hello'

    def test_monitor_command_failure(self):
        result = monitor_command(['false'])

        assert not result.success
        assert result.result.status_code != 0

    def test_monitor_command_missing_binary(self):
        result = monitor_command(['/nonexistent/nvme', 'list'])

        assert not result.success
        assert result.result.status_code is None

    def test_device_prefix(self):
        prefixes = ('/dev/sd', '/dev/xvd', '/dev/hd')

        assert device_prefix('/dev/xvdf', prefixes) == '/dev/xvd'
        assert device_prefix('/dev/sdf', prefixes) == '/dev/sd'
        assert device_prefix('/dev/nvme0n1', prefixes) is None

    def test_parent_device(self, tmp_path):
        target = tmp_path / 'target'
        target.touch()
        link = tmp_path / 'link'
        link.symlink_to(target)

        assert parent_device(str(target)) == str(target)
        assert parent_device(str(link)) == str(target.resolve())
