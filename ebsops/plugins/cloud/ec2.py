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
ebsops.plugins.cloud.ec2
========================
ec2 storage provider
"""
import logging
import threading

from botocore.exceptions import ClientError

from ebsops import devices
from ebsops.exceptions import (DeviceException, InvalidDevicePath, ResourceNotFound,
                               StorageError, VolumeAttachedOnRemoteNode, VolumeDetached, VolumeInvalid)
from ebsops.models import (ATTACHMENT_ATTACHED, ATTACHMENT_DETACHED, PROVISIONED_IOPS_TYPES, VOLUME_AVAILABLE,
                           Snapshot, Volume)
from ebsops.plugins.cloud.base import BaseCloudPlugin, SET_IDENTIFIER_NONE
from ebsops.util import retry_with_timeout


__all__ = ('EC2CloudPlugin',)
log = logging.getLogger(__name__)


class TransitionPending(StorageError):
    """ raised while polling until a resource reaches the desired state """


class EC2CloudPlugin(BaseCloudPlugin):
    _name = 'aws'

    def __init__(self, instance, instance_type, client, config=None):
        """
        :param instance: id of the instance we run on
        :param instance_type: its instance type, eg. m5.large
        :param client: a boto3 ec2 client for the instance's region
        :param config: ebsops.config.Config, packaged defaults when None
        """
        super(EC2CloudPlugin, self).__init__()
        self._instance = instance
        self._instance_type = instance_type
        self._client = client
        # serializes free device lookup and attachment
        self._lock = threading.Lock()
        self.configure(config)

    def configure(self, config=None):
        super(EC2CloudPlugin, self).configure(config)
        config = self._config
        self._device_letters = config.get('device_letters', devices.DEVICE_LETTERS)
        self._device_prefixes = tuple(config.get('device_prefixes', devices.DEVICE_PREFIXES))
        self._ops_timeout = config.get('provider_ops_timeout', 300)
        self._ops_interval = config.get('provider_ops_retry_interval', 5)
        self._attach_timeout = config.get('attach_timeout', 60)
        self._attach_interval = config.get('attachment_retry_interval', 2)
        self._resolver = devices.DevicePathResolver(
            self._instance_type,
            nvme_instance_types=config.get('nvme_instance_types', devices.NVME_INSTANCE_TYPES),
            prefixes=self._device_prefixes,
            nvme_command=config.get('nvme_command', 'nvme'))

    @property
    def instance_id(self):
        return self._instance

    @property
    def instance_type(self):
        return self._instance_type

    @staticmethod
    def _filters(labels):
        return [{'Name': 'tag:{0}'.format(k), 'Values': [v]} for k, v in labels.items()]

    @staticmethod
    def _tags(labels):
        return [{'Key': k, 'Value': v} for k, v in labels.items()]

    @staticmethod
    def _match_tag(tag, match):
        return bool(tag.get('Key')) and bool(tag.get('Value')) and tag['Key'] == match

    def _wait_status(self, volume_id, desired):
        log.info('Waiting for {0} to become {1}'.format(volume_id, desired))

        # api errors are retried along with state mismatches
        @retry_with_timeout((ClientError, StorageError), timeout=self._ops_timeout, interval=self._ops_interval,
                            logger=log)
        def _check():
            response = self._client.describe_volumes(VolumeIds=[volume_id])
            volumes = response.get('Volumes', [])
            if len(volumes) != 1:
                raise ResourceNotFound('expected one volume {0} got {1}'.format(volume_id, len(volumes)), volume_id)
            actual = volumes[0].get('State')
            if actual is None:
                raise VolumeInvalid('Nil volume state for {0}'.format(volume_id), volume_id)
            if actual != desired:
                raise TransitionPending('Volume {0} did not transition to {1} current state {2}'.format(
                    volume_id, desired, actual), volume_id)
            log.debug('{0} reached state {1}'.format(volume_id, desired))
            return Volume.from_response(volumes[0])

        return _check()

    def _wait_attachment_status(self, volume_id, desired, timeout):
        log.info('Waiting for {0} attachment state transition to {1!r}'.format(volume_id, desired))

        @retry_with_timeout(TransitionPending, timeout=timeout, interval=self._attach_interval, logger=log)
        def _check():
            response = self._client.describe_volumes(VolumeIds=[volume_id])
            volumes = response.get('Volumes', [])
            if len(volumes) != 1:
                raise ResourceNotFound('expected one volume {0} got {1}'.format(volume_id, len(volumes)), volume_id)
            volume = Volume.from_response(volumes[0])
            if volume.attachment is None:
                # volumes moving from detaching to attaching have been seen with no attachment at all
                actual = ATTACHMENT_DETACHED
            else:
                actual = volume.attachment.state
            if actual != desired:
                raise TransitionPending('Volume {0} failed to transition to {1} current state {2}'.format(
                    volume_id, desired, actual), volume_id)
            return volume

        return _check()

    def _refresh(self, volume_id):
        volumes = self.inspect([volume_id])
        if len(volumes) != 1:
            raise ResourceNotFound('failed to get vol: {0}. Found: {1} volumes on inspecting'.format(
                volume_id, len(volumes)), volume_id)
        return volumes[0]

    def _rollback_create(self, volume_id, error):
        log.warning('Rollback create volume {0}, Error {1}'.format(volume_id, error))
        try:
            self.delete(volume_id)
        except Exception as e:
            log.warning('Rollback failed volume {0}, Error {1}'.format(volume_id, e))

    def apply_tags(self, volume_id, labels):
        log.debug('Tagging {0} with {1}'.format(volume_id, labels))
        self._client.create_tags(Resources=[volume_id], Tags=self._tags(labels))

    def remove_tags(self, volume_id, labels):
        log.debug('Removing tags {0} from {1}'.format(labels, volume_id))
        self._client.delete_tags(Resources=[volume_id], Tags=self._tags(labels))

    def tags(self, volume_id):
        return dict(self._refresh(volume_id).tags)

    def device_mappings(self):
        instance = self.describe()
        root_device_name = instance.get('RootDeviceName')
        mappings = {}
        for mapping in instance.get('BlockDeviceMappings', []):
            device_name = mapping.get('DeviceName')
            volume_id = (mapping.get('Ebs') or {}).get('VolumeId')
            if not device_name or not volume_id:
                continue
            if device_name == root_device_name:
                continue
            try:
                path = self._resolver.resolve(device_name, volume_id)
            except InvalidDevicePath as e:
                raise InvalidDevicePath('unable to get actual device path for {0}. {1}'.format(device_name, e.msg),
                                        self._instance)
            mappings[path] = volume_id
        return mappings

    def describe(self):
        response = self._client.describe_instances(InstanceIds=[self._instance])
        reservations = response.get('Reservations', [])
        if len(reservations) != 1:
            raise ResourceNotFound('DescribeInstances({0}) returned {1} reservations, expect 1'.format(
                self._instance, len(reservations)), self._instance)
        instances = reservations[0].get('Instances', [])
        if len(instances) != 1:
            raise ResourceNotFound('DescribeInstances({0}) returned {1} instances, expect 1'.format(
                self._instance, len(instances)), self._instance)
        return instances[0]

    def free_devices(self, block_device_mappings, root_device_name):
        names = []
        for mapping in block_device_mappings:
            name = mapping.get('DeviceName')
            if not name:
                raise DeviceException('Nil device name')
            names.append(name)
        return devices.free_devices(names, root_device_name, letters=self._device_letters,
                                    prefixes=self._device_prefixes)

    def get_device_id(self, handle):
        if isinstance(handle, (Volume, Snapshot)):
            return handle.id
        raise VolumeInvalid('invalid type: {0!r} given to get_device_id'.format(handle))

    def inspect(self, volume_ids):
        request = {}
        if volume_ids:
            request['VolumeIds'] = list(volume_ids)
        response = self._client.describe_volumes(**request)
        return [Volume.from_response(v) for v in response.get('Volumes', [])]

    def enumerate(self, volume_ids=None, labels=None, set_identifier=''):
        request = {}
        if labels:
            request['Filters'] = self._filters(labels)
        if volume_ids:
            request['VolumeIds'] = list(volume_ids)
        response = self._client.describe_volumes(**request)

        sets = {}
        for data in response.get('Volumes', []):
            volume = Volume.from_response(data)
            if volume.deleted:
                continue
            key = SET_IDENTIFIER_NONE
            if set_identifier:
                for tag in data.get('Tags') or ():
                    if self._match_tag(tag, set_identifier):
                        key = tag['Value']
                        break
            sets.setdefault(key, []).append(volume)
        return sets

    def create(self, template, labels=None):
        if not isinstance(template, Volume):
            raise VolumeInvalid('Invalid volume template given')

        request = {
            'AvailabilityZone': template.availability_zone,
            'Encrypted': bool(template.encrypted),
            'VolumeType': template.volume_type,
        }
        if template.size is not None:
            request['Size'] = template.size
        if template.kms_key_id:
            request['KmsKeyId'] = template.kms_key_id
        if template.snapshot_id:
            request['SnapshotId'] = template.snapshot_id
        if template.volume_type in PROVISIONED_IOPS_TYPES and template.iops:
            request['Iops'] = template.iops

        log.debug('Creating volume {0}'.format(request))
        response = self._client.create_volume(**request)
        volume_id = response['VolumeId']
        log.debug('Volume {0} created'.format(volume_id))

        try:
            self._wait_status(volume_id, VOLUME_AVAILABLE)
            if labels:
                self.apply_tags(volume_id, labels)
        except Exception as e:
            self._rollback_create(volume_id, e)
            raise

        return self._refresh(volume_id)

    def delete_from(self, volume_id, instance_id):
        return self.delete(volume_id)

    def delete(self, volume_id):
        log.debug('Deleting volume {0}'.format(volume_id))
        self._client.delete_volume(VolumeId=volume_id)

    def attach(self, volume_id):
        with self._lock:
            instance = self.describe()
            free = self.free_devices(instance.get('BlockDeviceMappings', []), instance.get('RootDeviceName', ''))
            log.debug('Attaching volume {0} to {1}:{2}'.format(volume_id, self._instance, free[0]))
            self._client.attach_volume(Device=free[0], InstanceId=self._instance, VolumeId=volume_id)
            volume = self._wait_attachment_status(volume_id, ATTACHMENT_ATTACHED, self._attach_timeout)
        log.debug('Volume {0} attached to {1}:{2}'.format(volume_id, self._instance, free[0]))
        return self.device_path(volume.id)

    def detach(self, volume_id):
        return self.detach_from(volume_id, self._instance)

    def detach_from(self, volume_id, instance_id):
        log.debug('Detaching volume {0} from {1}'.format(volume_id, instance_id))
        self._client.detach_volume(InstanceId=instance_id, VolumeId=volume_id, Force=False)
        self._wait_attachment_status(volume_id, ATTACHMENT_DETACHED, self._attach_timeout)
        log.debug('Successfully detached volume {0} from {1}'.format(volume_id, instance_id))

    def snapshot(self, volume_id, readonly=False):
        """ EBS snapshots are always crash consistent copies, readonly is accepted for interface compatibility """
        log.debug('Creating snapshot of {0}'.format(volume_id))
        response = self._client.create_snapshot(VolumeId=volume_id)
        return Snapshot.from_response(response)

    def snapshot_delete(self, snapshot_id):
        log.debug('Deleting snapshot {0}'.format(snapshot_id))
        self._client.delete_snapshot(SnapshotId=snapshot_id)

    def device_path(self, volume_id):
        volume = self._refresh(volume_id)

        attachment = volume.attachment
        if attachment is None:
            raise VolumeDetached('Volume is detached', volume.id)
        if attachment.instance_id is None:
            raise VolumeInvalid('Unable to determine volume instance attachment')
        if attachment.instance_id != self._instance:
            raise VolumeAttachedOnRemoteNode('Volume attached on {0!r} current instance {1!r}'.format(
                attachment.instance_id, self._instance), attachment.instance_id)
        if attachment.state is None:
            raise VolumeInvalid('Unable to determine volume attachment state')
        if attachment.state != ATTACHMENT_ATTACHED:
            raise VolumeInvalid('Invalid state {0!r}, volume is not attached'.format(attachment.state))
        if attachment.device is None:
            raise VolumeInvalid('Unable to determine volume attachment path')

        try:
            return self._resolver.resolve(attachment.device, volume_id)
        except InvalidDevicePath as e:
            raise VolumeInvalid(e.msg)
