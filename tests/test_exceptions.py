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
from ebsops.exceptions import (ErrInvalidDevicePath, ErrVolAttachedOnRemoteNode, InvalidDevicePath, StorageError,
                               VolumeAttachedOnRemoteNode, new_storage_error)


class TestStorageError(object):

    def test_new_storage_error_picks_subclass(self):
        error = new_storage_error(ErrVolAttachedOnRemoteNode, 'attached elsewhere', 'i-remote')

        assert isinstance(error, VolumeAttachedOnRemoteNode)
        assert error.code == ErrVolAttachedOnRemoteNode
        assert error.resource_id == 'i-remote'
        assert str(error) == 'ErrVolAttachedOnRemoteNode (i-remote): attached elsewhere'

    def test_new_storage_error_unknown_code(self):
        error = new_storage_error('ErrSomethingElse', 'odd')

        assert type(error) is StorageError
        assert error.code == 'ErrSomethingElse'
        assert str(error) == 'ErrSomethingElse: odd'

    def test_subclass_code(self):
        assert InvalidDevicePath('no node').code == ErrInvalidDevicePath
