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
ebsops.models
=============
volume and snapshot handles exchanged with callers of the storage ops interface
"""
from collections import namedtuple


__all__ = ('Attachment', 'Volume', 'Snapshot')

# volume states
VOLUME_CREATING = 'creating'
VOLUME_AVAILABLE = 'available'
VOLUME_IN_USE = 'in-use'
VOLUME_DELETING = 'deleting'
VOLUME_DELETED = 'deleted'
VOLUME_ERROR = 'error'

# attachment states
ATTACHMENT_ATTACHING = 'attaching'
ATTACHMENT_ATTACHED = 'attached'
ATTACHMENT_DETACHING = 'detaching'
ATTACHMENT_DETACHED = 'detached'

# volume types for which an explicit IOPS value is meaningful
PROVISIONED_IOPS_TYPES = ('io1', 'io2')

Attachment = namedtuple('Attachment', 'volume_id instance_id device state')


def _tags_to_dict(tags):
    return dict((tag['Key'], tag['Value']) for tag in tags or () if 'Key' in tag)


class Volume(object):
    """
    An EBS volume. Either built from a DescribeVolumes/CreateVolume response item with
    from_response(), or by hand as the template passed to create().
    """

    def __init__(self, size=None, availability_zone=None, volume_type='gp2', encrypted=False, kms_key_id=None,
                 iops=None, snapshot_id=None, id=None, state=None, attachments=None, tags=None):
        self.id = id
        self.size = size
        self.availability_zone = availability_zone
        self.volume_type = volume_type
        self.encrypted = encrypted
        self.kms_key_id = kms_key_id
        self.iops = iops
        self.snapshot_id = snapshot_id
        self.state = state
        self.attachments = list(attachments or ())
        self.tags = dict(tags or {})

    @classmethod
    def from_response(cls, data):
        attachments = [Attachment(a.get('VolumeId'), a.get('InstanceId'), a.get('Device'), a.get('State'))
                       for a in data.get('Attachments') or ()]
        return cls(id=data.get('VolumeId'),
                   size=data.get('Size'),
                   availability_zone=data.get('AvailabilityZone'),
                   volume_type=data.get('VolumeType'),
                   encrypted=data.get('Encrypted', False),
                   kms_key_id=data.get('KmsKeyId'),
                   iops=data.get('Iops'),
                   snapshot_id=data.get('SnapshotId') or None,
                   state=data.get('State'),
                   attachments=attachments,
                   tags=_tags_to_dict(data.get('Tags')))

    @property
    def attachment(self):
        """ the volume's attachment, None when detached """
        return self.attachments[0] if self.attachments else None

    @property
    def deleted(self):
        return self.state in (VOLUME_DELETING, VOLUME_DELETED)

    @property
    def available(self):
        return self.state == VOLUME_AVAILABLE

    def to_dict(self):
        return {
            'id': self.id,
            'size': self.size,
            'availability_zone': self.availability_zone,
            'volume_type': self.volume_type,
            'encrypted': self.encrypted,
            'iops': self.iops,
            'snapshot_id': self.snapshot_id,
            'state': self.state,
            'attachments': [dict(a._asdict()) for a in self.attachments],
            'tags': dict(self.tags),
        }

    def __repr__(self):
        return '<Volume {0} ({1})>'.format(self.id, self.state)


class Snapshot(object):
    """ A point in time copy of a volume """

    def __init__(self, id, volume_id=None, state=None, description=None, tags=None):
        self.id = id
        self.volume_id = volume_id
        self.state = state
        self.description = description
        self.tags = dict(tags or {})

    @classmethod
    def from_response(cls, data):
        return cls(id=data.get('SnapshotId'),
                   volume_id=data.get('VolumeId'),
                   state=data.get('State'),
                   description=data.get('Description'),
                   tags=_tags_to_dict(data.get('Tags')))

    def to_dict(self):
        return {
            'id': self.id,
            'volume_id': self.volume_id,
            'state': self.state,
            'description': self.description,
            'tags': dict(self.tags),
        }

    def __repr__(self):
        return '<Snapshot {0} ({1})>'.format(self.id, self.state)
