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
import re

from setuptools import setup, find_packages

here = os.path.abspath(os.path.dirname(__file__))

with open(os.path.join(here, 'requirements.txt')) as fh:
    requires = [requirement.strip() for requirement in fh if requirement.strip()]

with open(os.path.join(here, 'ebsops', '__init__.py')) as fh:
    version = re.search(r"^__version__ = '([^']+)'", fh.read(), re.M).group(1)

entry_points = {
    'console_scripts': [
        'ebsops = ebsops.cli:run',
    ],
    'ebsops.plugins.cloud': [
        'aws = ebsops.plugins.cloud.ec2:EC2CloudPlugin',
    ],
}

exclude_packages = [
    'tests',
    'tests.*',
]

package_data = {'ebsops': ['default_conf/*.yml']}

setup(
    name='ebsops',
    version=version,
    description='ebsops: EBS volume operations for the instance you run on',
    packages=find_packages(exclude=exclude_packages),
    package_data=package_data,
    include_package_data=True,
    zip_safe=False,
    python_requires='>=3.9',
    install_requires=requires,
    extras_require={
        'test': ['pytest'],
    },
    entry_points=entry_points,
    license='ASL 2.0',
    classifiers=(
        'Development Status :: 4 - Beta',
        'Environment :: Console',
        'Intended Audience :: Developers',
        'Intended Audience :: System Administrators',
        'License :: OSI Approved :: Apache Software License',
        'Natural Language :: English',
        'Programming Language :: Python :: 3',
        'Topic :: System :: Systems Administration',
        'Topic :: Utilities',
    ),
)
