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
ebsops.environment
==================
builds a storage provider for the instance described by the process environment
"""
import logging
import os

import boto3
from botocore.credentials import EnvProvider

from ebsops.exceptions import CredentialsException, EnvironmentException
from ebsops.plugins.manager import load_cloud_plugin


__all__ = ('get_env_value_strict', 'new_env_client')
log = logging.getLogger(__name__)

ENV_REGION = 'AWS_REGION'
ENV_INSTANCE_NAME = 'AWS_INSTANCE_NAME'
ENV_INSTANCE_TYPE = 'AWS_INSTANCE_TYPE'


def get_env_value_strict(key, environ=None):
    environ = os.environ if environ is None else environ
    value = environ.get(key, '').strip()
    if not value:
        raise EnvironmentException('env variable {0} is not set'.format(key))
    return value


def env_credentials(environ=None):
    """
    :return: botocore credentials taken from AWS_ACCESS_KEY_ID/AWS_SECRET_ACCESS_KEY
    :raises CredentialsException: if the environment carries none
    """
    credentials = EnvProvider(environ=environ).load()
    if credentials is None:
        raise CredentialsException('AWS credentials are not set in environment')
    return credentials


def new_env_client(config=None, environ=None, provider='aws'):
    """
    Creates the storage provider plugin for the instance named by AWS_INSTANCE_NAME
    in AWS_REGION, using credentials from the environment.
    """
    region = get_env_value_strict(ENV_REGION, environ)
    instance = get_env_value_strict(ENV_INSTANCE_NAME, environ)
    instance_type = get_env_value_strict(ENV_INSTANCE_TYPE, environ)
    credentials = env_credentials(environ)

    log.debug('Connecting to EC2 in region {0} for instance {1} ({2})'.format(region, instance, instance_type))
    client = boto3.client('ec2',
                          region_name=region,
                          aws_access_key_id=credentials.access_key,
                          aws_secret_access_key=credentials.secret_key,
                          aws_session_token=credentials.token)
    return load_cloud_plugin(provider, instance=instance, instance_type=instance_type, client=client, config=config)
