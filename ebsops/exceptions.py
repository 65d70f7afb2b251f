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
ebsops.exceptions
=================
ebsops's exceptions
"""

ErrNotFound = 'ErrNotFound'
ErrVolDetached = 'ErrVolDetached'
ErrVolInval = 'ErrVolInval'
ErrVolAttachedOnRemoteNode = 'ErrVolAttachedOnRemoteNode'
ErrInvalidDevicePath = 'ErrInvalidDevicePath'
ErrStateTransitionTimeout = 'ErrStateTransitionTimeout'


class EbsOpsException(Exception):
    """ Base ebsops Exception """
    pass


class ConfigException(EbsOpsException):
    """ Errors while loading configuration """


class EnvironmentException(EbsOpsException):
    """ A required environment variable is missing """


class CredentialsException(EbsOpsException):
    """ Provider credentials are not available """


class DeviceException(EbsOpsException):
    """ Errors during device allocation """
    pass


class StorageError(EbsOpsException):
    """
    Error returned by storage operations.

    :param code: one of the Err* kinds defined in this module
    :param msg: human readable description
    :param resource_id: id of the volume or instance the error is about
    """
    code = None

    def __init__(self, msg, resource_id='', code=None):
        super(StorageError, self).__init__(msg)
        self.msg = msg
        self.resource_id = resource_id
        if code is not None:
            self.code = code

    def __str__(self):
        if self.resource_id:
            return '{0} ({1}): {2}'.format(self.code, self.resource_id, self.msg)
        return '{0}: {1}'.format(self.code, self.msg)


class ResourceNotFound(StorageError):
    """ Zero or more than one resource found where exactly one was expected """
    code = ErrNotFound


class VolumeInvalid(StorageError):
    code = ErrVolInval


class VolumeDetached(StorageError):
    code = ErrVolDetached


class VolumeAttachedOnRemoteNode(StorageError):
    """ Volume is attached to an instance other than ours """
    code = ErrVolAttachedOnRemoteNode


class InvalidDevicePath(StorageError):
    code = ErrInvalidDevicePath


class StateTransitionTimeout(StorageError):
    """ A polled resource never reached the desired state """
    code = ErrStateTransitionTimeout


_errors_by_code = dict((cls.code, cls) for cls in (ResourceNotFound, VolumeInvalid, VolumeDetached,
                                                   VolumeAttachedOnRemoteNode, InvalidDevicePath,
                                                   StateTransitionTimeout))


def new_storage_error(code, msg, resource_id=''):
    """
    build the StorageError subclass registered for code. Unknown codes produce a plain
    StorageError carrying the code.
    """
    cls = _errors_by_code.get(code)
    if cls is None:
        return StorageError(msg, resource_id, code=code)
    return cls(msg, resource_id)
