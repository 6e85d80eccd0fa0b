#!/usr/bin/env python
# -*- coding: utf-8 -*-
import os

from setuptools import find_packages, setup

here = os.path.abspath(os.path.dirname(__file__))

# There are problems running setup.py on Windows if the encoding is not set
with open(os.path.join(here, 'README.md'), encoding='utf8') as readme_file:
    readme = readme_file.read()

with open(os.path.join(here, 'datalyr', 'VERSION'), encoding='utf8') as version_file:
    version = version_file.read().strip()


setup(
    name='datalyr',
    version=version,
    description="Server-side client that batches analytics events and delivers them to Datalyr.",
    long_description=readme,
    long_description_content_type="text/markdown",
    author="Datalyr",
    author_email='support@datalyr.com',
    url='https://github.com/datalyr/datalyr-python',
    packages=find_packages(exclude=['tests', 'tests.*']),
    package_data={'datalyr': ['VERSION']},
    entry_points={
        'console_scripts': [
            'datalyr=datalyr.cli:cli'
        ]
    },
    include_package_data=True,
    install_requires=[
        'Click>=8.0',
        'httpx>=0.24',
        'pydantic>=2.0',
        'tenacity>=8.2',
    ],
    extras_require={
        'test': [
            'pytest>=7.0',
        ],
    },
    python_requires=">=3.9",
    license="MIT license",
    zip_safe=False,
    keywords='datalyr analytics tracking events',
    classifiers=[
        'Development Status :: 5 - Production/Stable',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Natural Language :: English',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
    ]
)
