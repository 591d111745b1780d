#!/usr/bin/env python3
# Copyright (c) 2017-present, Facebook, Inc.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree. An additional grant
# of patent rights can be found in the PATENTS file in the same directory.

from os import path
from setuptools import setup, find_packages


here = path.abspath(path.dirname(__file__))
with open(path.join(here, 'README.md'), encoding='utf-8') as f:
    long_description = f.read()

setup(
    name='grade',
    version='0.1',
    description='Store Go benchmark results in a time-series database',
    long_description=long_description,
    long_description_content_type='text/markdown',
    license='BSD',
    classifiers=[
        'Development Status :: 3 - Alpha',
        'License :: OSI Approved :: BSD License',
        'Operating System :: POSIX :: Linux',
        'Programming Language :: Python :: 3 :: Only',
        'Programming Language :: Python :: 3.8',
        'Topic :: Software Development :: Testing',
        'Topic :: Utilities',
        'Intended Audience :: Developers',
    ],
    keywords='benchmark go influxdb',
    packages=find_packages(exclude=['tests']),
    python_requires='>=3.8',
    install_requires=['click', 'httpx', 'pyyaml'],
    extras_require={
        'test': ['pytest', 'coverage', 'pyfakefs'],
    },
    py_modules=['grade_cli'],
    entry_points={
        'console_scripts': ['grade=grade_cli:entry_point'],
    },
)
