#!/usr/bin/env python
"""
Copyright 2025 Hathor Labs

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at

   http://www.apache.org/licenses/LICENSE-2.0

Unless required by applicable law or agreed to in writing, software
distributed under the License is distributed on an "AS IS" BASIS,
WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
See the License for the specific language governing permissions and
limitations under the License.
"""

from pathlib import Path

from setuptools import find_packages, setup

# read the version without importing the package, its dependencies may not be installed yet
version: dict[str, str] = {}
exec((Path(__file__).parent / 'busvariant' / 'version.py').read_text(), version)

setup(
    name='busvariant',
    version=version['__version__'],
    description='Marshalling of typed values in the D-Bus and GVariant wire formats',
    author='Hathor Team',
    author_email='contact@hathor.network',
    url='https://hathor.network/',
    license='Apache-2.0',
    classifiers=[
        'Programming Language :: Python :: 3',
        'Operating System :: OS Independent',
        'License :: OSI Approved :: Apache Software License',
    ],
    python_requires='>=3.10',
    packages=find_packages(exclude=('busvariant_tests', 'busvariant_tests.*')),
    package_data={'busvariant.conf': ['*.yml']},
    install_requires=[
        'structlog',
        'pydantic>=2',
        'pyyaml',
        'typing_extensions',
    ],
    extras_require={
        'test': ['pytest'],
    },
)
