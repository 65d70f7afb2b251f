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
ebsops.plugins.cloud.base
=========================
Base class(es) for cloud storage plugins
"""
import abc
import logging

from ebsops.plugins.base import BasePlugin


__all__ = ('BaseCloudPlugin', 'SET_IDENTIFIER_NONE')
log = logging.getLogger(__name__)

# set key for enumerated volumes that carry no set identifier tag
SET_IDENTIFIER_NONE = 'None'


class BaseCloudPlugin(BasePlugin, metaclass=abc.ABCMeta):
    """
    Cloud plugins map the generic storage operations onto one provider's volume APIs
    for the instance the process runs on. Volumes and snapshots are exchanged as
    ebsops.models.Volume and ebsops.models.Snapshot handles.
    """
    _entry_point = 'ebsops.plugins.cloud'

    @property
    @abc.abstractmethod
    def instance_id(self):
        """ id of the instance this plugin operates on """

    @abc.abstractmethod
    def create(self, template, labels=None):
        """ creates a volume from a Volume template, waits for it to become available and tags it """

    @abc.abstractmethod
    def delete(self, volume_id):
        """ destroys a volume """

    @abc.abstractmethod
    def delete_from(self, volume_id, instance_id):
        """ destroys a volume on behalf of instance_id """

    @abc.abstractmethod
    def attach(self, volume_id):
        """ attaches a volume to this instance and returns the host device path """

    @abc.abstractmethod
    def detach(self, volume_id):
        """ detaches a volume from this instance """

    @abc.abstractmethod
    def detach_from(self, volume_id, instance_id):
        """ detaches a volume from instance_id """

    @abc.abstractmethod
    def inspect(self, volume_ids):
        """ returns Volume handles for volume_ids """

    @abc.abstractmethod
    def enumerate(self, volume_ids=None, labels=None, set_identifier=''):
        """ returns volumes matching labels, grouped by the value of their set_identifier tag """

    @abc.abstractmethod
    def snapshot(self, volume_id, readonly=False):
        """ creates a snapshot of a volume """

    @abc.abstractmethod
    def snapshot_delete(self, snapshot_id):
        """ destroys a snapshot """

    @abc.abstractmethod
    def apply_tags(self, volume_id, labels):
        """ adds labels to a volume """

    @abc.abstractmethod
    def remove_tags(self, volume_id, labels):
        """ removes labels from a volume """

    @abc.abstractmethod
    def tags(self, volume_id):
        """ returns a volume's labels """

    @abc.abstractmethod
    def device_mappings(self):
        """ returns a dict of host device path to volume id for volumes attached to this instance """

    @abc.abstractmethod
    def device_path(self, volume_id):
        """ returns the host device path of a volume attached to this instance """

    @abc.abstractmethod
    def free_devices(self, block_device_mappings, root_device_name):
        """ returns device names available for a new attachment """

    @abc.abstractmethod
    def get_device_id(self, handle):
        """ returns the id of a Volume or Snapshot handle """

    @abc.abstractmethod
    def describe(self):
        """ describes this instance """
