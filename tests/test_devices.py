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
import os

import pytest

import ebsops.devices
from ebsops.devices import DevicePathResolver, free_devices, prefix_from_root_device
from ebsops.exceptions import DeviceException, InvalidDevicePath
from ebsops.util.linux import CommandResult, Response


NVME_LIST = u"""Node             SN                   Model                                    Namespace Usage                      Format           FW Rev
---------------- -------------------- ---------------------------------------- --------- -------------------------- ---------------- --------
/dev/nvme0n1     vol00fd6f8c30dc619f4 Amazon Elastic Block Store               1           0.00   B / 137.44  GB    512   B +  0 B   1.0
/dev/nvme1n1     vol0123456789abcdef0 Amazon Elastic Block Store               1           0.00   B / 107.37  GB    512   B +  0 B   1.0
"""


class TestFreeDevices(object):

    def test_no_mappings_sd_root(self):
        free = free_devices([], '/dev/sda1')

        assert free == ['/dev/sd' + letter for letter in 'fghijklmnop']

    def test_no_mappings_xvd_root(self):
        free = free_devices([], '/dev/xvda')

        assert free == ['/dev/xvd' + letter for letter in 'fghijklmnop']

    def test_used_letters_are_consumed_whatever_their_prefix(self):
        free = free_devices(['/dev/xvda', '/dev/sdf', '/dev/xvdg', '/dev/hdh'], '/dev/xvda')

        assert len(free) == 8
        assert len(set(free)) == 8
        assert free == ['/dev/xvd' + letter for letter in 'ijklmnop']

    def test_new_names_follow_root_prefix_not_mappings(self):
        free = free_devices(['/dev/xvdf', '/dev/xvdg'], '/dev/sda1')

        assert all(name.startswith('/dev/sd') for name in free)
        assert free[0] == '/dev/sdh'

    def test_two_character_suffix_never_consumes(self):
        free = free_devices(['/dev/xvdba', '/dev/xvdcf', '/dev/sdf1'], '/dev/xvda')

        assert len(free) == 11

    def test_out_of_range_letters_are_skipped(self):
        free = free_devices(['/dev/sdb', '/dev/sde', '/dev/sdq', '/dev/sdz'], '/dev/sda1')

        assert len(free) == 11

    def test_root_device_is_not_counted(self):
        free = free_devices(['/dev/sdf'], '/dev/sdf')

        assert '/dev/sdf' in free
        assert len(free) == 11

    def test_unknown_prefix_is_fatal(self):
        with pytest.raises(DeviceException):
            free_devices(['/dev/sdf', '/dev/nvme1n1'], '/dev/xvda')

    def test_unknown_prefix_is_fatal_regardless_of_position(self):
        with pytest.raises(DeviceException):
            free_devices(['/dev/vdb', '/dev/sdf'], '/dev/xvda')

    def test_name_without_suffix_is_fatal(self):
        with pytest.raises(DeviceException):
            free_devices(['/dev/sd'], '/dev/sda1')

    def test_long_suffix_is_fatal(self):
        with pytest.raises(DeviceException):
            free_devices(['/dev/xvdfoo'], '/dev/xvda')

    def test_exhausted(self):
        used = ['/dev/sd' + letter for letter in 'fghijklmnop']

        with pytest.raises(DeviceException) as excinfo:
            free_devices(used, '/dev/sda1')
        assert 'No more free devices' in str(excinfo.value)

    def test_one_left(self):
        used = ['/dev/sd' + letter for letter in 'fghijklmno']

        assert free_devices(used, '/dev/sda1') == ['/dev/sdp']

    def test_unknown_root_prefix(self):
        with pytest.raises(DeviceException):
            free_devices([], '/dev/nvme0n1')

    def test_prefix_from_root_device(self):
        assert prefix_from_root_device('/dev/sda1') == '/dev/sd'
        assert prefix_from_root_device('/dev/xvda') == '/dev/xvd'
        assert prefix_from_root_device('/dev/hda') == '/dev/hd'


class TestDevicePathResolver(object):

    def _prefixes(self, root):
        return tuple(os.path.join(str(root), name) for name in ('sd', 'xvd', 'hd'))

    def test_first_existing_prefix_wins(self, tmp_path):
        prefixes = self._prefixes(tmp_path)
        (tmp_path / 'xvdf').touch()
        (tmp_path / 'hdf').touch()
        resolver = DevicePathResolver('t2.micro', prefixes=prefixes)

        assert resolver.resolve('/dev/sdf', 'vol-1') == prefixes[1] + 'f'

    def test_sd_preferred(self, tmp_path):
        prefixes = self._prefixes(tmp_path)
        (tmp_path / 'sdg').touch()
        (tmp_path / 'xvdg').touch()
        resolver = DevicePathResolver('t2.micro', prefixes=prefixes)

        assert resolver.resolve('/dev/xvdg', 'vol-1') == prefixes[0] + 'g'

    def test_symlinks_are_followed(self, tmp_path):
        prefixes = self._prefixes(tmp_path)
        target = tmp_path / 'nvme1n1'
        target.touch()
        os.symlink(str(target), str(tmp_path / 'sdh'))
        resolver = DevicePathResolver('m5.large', prefixes=prefixes)

        assert resolver.resolve('/dev/sdh', 'vol-1') == os.path.realpath(str(target))

    def test_non_nvme_instance_fails(self, tmp_path):
        resolver = DevicePathResolver('t2.micro', prefixes=self._prefixes(tmp_path))
        resolver.nvme_list = lambda: pytest.fail('nvme list must not run on non nvme instances')

        with pytest.raises(InvalidDevicePath) as excinfo:
            resolver.resolve('/dev/sdf', 'vol-1')
        assert 'unable to map volume vol-1' in str(excinfo.value)

    def test_nvme_lookup(self, tmp_path, monkeypatch):
        monkeypatch.setattr(ebsops.devices, 'node_exists', lambda path: path == '/dev/nvme1n1')
        resolver = DevicePathResolver('m5.xlarge', prefixes=self._prefixes(tmp_path))
        resolver.nvme_list = lambda: CommandResult(True, Response('nvme list', '', NVME_LIST, 0))

        assert resolver.resolve('/dev/sdf', 'vol-0123456789abcdef0') == '/dev/nvme1n1'

    def test_nvme_instance_type_prefix_match(self):
        assert DevicePathResolver('c5d.2xlarge').uses_nvme
        assert DevicePathResolver('i3.metal').uses_nvme
        assert not DevicePathResolver('i3.large').uses_nvme
        assert not DevicePathResolver('t2.micro').uses_nvme

    def test_nvme_no_matching_row(self, tmp_path, monkeypatch):
        monkeypatch.setattr(ebsops.devices, 'node_exists', lambda path: False)
        resolver = DevicePathResolver('r5.large', prefixes=self._prefixes(tmp_path))
        resolver.nvme_list = lambda: CommandResult(True, Response('nvme list', '', NVME_LIST, 0))

        with pytest.raises(InvalidDevicePath):
            resolver.resolve('/dev/sdf', 'vol-0ffffffffffffffff')

    def test_nvme_node_missing(self, tmp_path, monkeypatch):
        monkeypatch.setattr(ebsops.devices, 'node_exists', lambda path: False)
        resolver = DevicePathResolver('z1d.large', prefixes=self._prefixes(tmp_path))
        resolver.nvme_list = lambda: CommandResult(True, Response('nvme list', '', NVME_LIST, 0))

        with pytest.raises(InvalidDevicePath) as excinfo:
            resolver.resolve('/dev/sdf', 'vol-0123456789abcdef0')
        assert '/dev/nvme1n1' in str(excinfo.value)

    def test_nvme_command_failure(self, tmp_path):
        resolver = DevicePathResolver('c5.large', prefixes=self._prefixes(tmp_path))
        resolver.nvme_list = lambda: CommandResult(False, Response('nvme list', 'permission denied', '', 1))

        with pytest.raises(InvalidDevicePath) as excinfo:
            resolver.resolve('/dev/sdf', 'vol-0123456789abcdef0')
        assert 'permission denied' in str(excinfo.value)

    def test_nvme_list_runs_configured_command(self, monkeypatch):
        calls = []

        def fake_monitor_command(cmd, timeout=None):
            calls.append((cmd, timeout))
            return CommandResult(True, Response(' '.join(cmd), '', NVME_LIST, 0))

        monkeypatch.setattr('ebsops.util.linux.monitor_command', fake_monitor_command)
        monkeypatch.setattr('ebsops.util.linux.shutil.which', lambda cmd: '/usr/sbin/' + cmd)
        resolver = DevicePathResolver('m5.large', nvme_command='nvme')

        assert resolver.nvme_device('vol-00fd6f8c30dc619f4') == '/dev/nvme0n1'
        assert calls == [(['/usr/sbin/nvme', 'list'], 10)]
