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
ebsops.devices
==============
device name allocation and host device path resolution for EBS attachments
"""
import logging

from ebsops.exceptions import DeviceException, InvalidDevicePath
from ebsops.util.linux import command, device_prefix, node_exists, parent_device, which


__all__ = ('free_devices', 'prefix_from_root_device', 'DevicePathResolver')
log = logging.getLogger(__name__)

DEVICE_LETTERS = 'fghijklmnop'
DEVICE_PREFIXES = ('/dev/sd', '/dev/xvd', '/dev/hd')
# instance families whose EBS volumes are exposed as NVMe block devices
NVME_INSTANCE_TYPES = ('c5', 'c5d', 'i3.metal', 'm5', 'm5d', 'r5', 'r5d', 'z1d')


def prefix_from_root_device(root_device_name, prefixes=DEVICE_PREFIXES):
    prefix = device_prefix(root_device_name, prefixes)
    if prefix is None:
        raise DeviceException('unknown prefix type on root device: {0}'.format(root_device_name))
    return prefix


def free_devices(device_names, root_device_name, letters=DEVICE_LETTERS, prefixes=DEVICE_PREFIXES):
    """
    Computes the device names still available for a new attachment.

    :param device_names: device names of the instance's current block device mappings
    :param root_device_name: the instance's root device, never counted as used
    :param letters: ordered pool of candidate device letters
    :param prefixes: known device prefixes, in the order they are tried
    :rtype: list
    :return: free device names, in letter order, using the root device's prefix
    """
    free = list(letters)
    for name in device_names:
        if name == root_device_name:
            continue
        prefix = device_prefix(name, prefixes)
        if prefix is None:
            raise DeviceException('bad device name {0!r}'.format(name))

        suffix = name[len(prefix):]
        if len(suffix) == 1:
            # letters outside the pool belong to somebody else's range
            if suffix in free:
                free[free.index(suffix)] = None
        elif len(suffix) == 2:
            # we never attach at /dev/xvd[b-c][a-z] style names
            continue
        else:
            raise DeviceException('cannot parse device name {0!r}'.format(name))

    # depending on virtualization type the root disk shows up as /dev/sda or /dev/xvda,
    # new attachments follow whichever convention the root device uses
    prefix = prefix_from_root_device(root_device_name, prefixes)

    available = [prefix + letter for letter in free if letter is not None]
    if not available:
        raise DeviceException('No more free devices')
    log.debug('free devices: {0}'.format(available))
    return available


class DevicePathResolver(object):
    """
    Maps the device name EC2 reports for an attachment to the node the kernel actually created.

    EC2 reports /dev/sdX style names regardless of the driver stack, while the kernel may expose
    the same disk as /dev/sdX, /dev/xvdX, /dev/hdX or, on nitro instance families, an NVMe
    namespace whose serial number is the volume id.
    """

    def __init__(self, instance_type, nvme_instance_types=NVME_INSTANCE_TYPES, prefixes=DEVICE_PREFIXES,
                 nvme_command='nvme'):
        self.instance_type = instance_type
        self.nvme_instance_types = tuple(nvme_instance_types)
        self.prefixes = tuple(prefixes)
        self.nvme_command = nvme_command

    @property
    def uses_nvme(self):
        return any(self.instance_type.startswith(prefix) for prefix in self.nvme_instance_types)

    def resolve(self, device_name, volume_id):
        """
        :param device_name: attachment device name as reported by EC2, eg. /dev/sdf
        :param volume_id: id of the attached volume
        :return: host device path
        :raises InvalidDevicePath: if no device node can be found
        """
        letter = device_name[-1:]
        for prefix in self.prefixes:
            path = prefix + letter
            if node_exists(path):
                log.debug('{0} ({1}) found at {2}'.format(volume_id, device_name, path))
                return parent_device(path)

        if not self.uses_nvme:
            raise InvalidDevicePath('unable to map volume {0} with block device mapping {1} to an '
                                    'actual device path on the host'.format(volume_id, device_name), volume_id)

        path = self.nvme_device(volume_id)
        if not node_exists(path):
            raise InvalidDevicePath('nvme device {0} for volume {1} does not exist'.format(path, volume_id), volume_id)
        return path

    @command(timeout=10)
    def nvme_list(self):
        return [which(self.nvme_command), 'list']

    def nvme_device(self, volume_id):
        """
        Finds the NVMe namespace backing volume_id in `nvme list` output. Typical output:

        Node             SN                   Model                       Namespace Usage ...
        ---------------- -------------------- --------------------------- --------- ----- ...
        /dev/nvme0n1     vol00fd6f8c30dc619f4 Amazon Elastic Block Store  1         ...
        /dev/nvme1n1     vol044e12c8c0af45b3d Amazon Elastic Block Store  1         ...
        """
        # serial numbers carry the volume id without its dash
        serial = volume_id.replace('-', '', 1)
        result = self.nvme_list()
        if not result.success:
            raise InvalidDevicePath('unable to map {0} volume to an nvme device: {1}'.format(
                volume_id, result.result.std_err.strip()), volume_id)

        for line in result.result.std_out.splitlines():
            if serial in line:
                node = line.split()[0]
                log.debug('{0} found at {1}'.format(volume_id, node))
                return node
        raise InvalidDevicePath('unable to map {0} volume to an nvme device: no matching namespace'.format(volume_id),
                                volume_id)
