import os
import re

from setuptools import find_packages, setup


def get_version():
    """
    read the version from the package so it is only defined in one place
    """
    with open(os.path.join(os.path.dirname(__file__), 'varprot', '__init__.py')) as fh:
        for line in fh:
            match = re.match(r'^__version__\s*=\s*[\'"]([^\'"]+)[\'"]', line)
            if match:
                return match.group(1)
    raise RuntimeError('unable to find the version string')


VERSION = get_version()


# HSTLIB is a dependency for pysam.
# The cram file libraries fail for some OS versions and varprot does not use cram files so we disable these options
os.environ['HTSLIB_CONFIGURE_OPTIONS'] = '--disable-lzma --disable-bz2 --disable-libcurl'


TEST_REQS = [
    'timeout-decorator>=0.3.3',
    'coverage>=4.2',
    'pytest',
    'pytest-cov',
]


INSTALL_REQS = [
    'biopython>=1.70',
    'braceexpand>=0.1.2',
    'intervaltree>=3.0.0',
    'numpy>=1.13.1',
    'pysam>=0.15',
    'tab>=0.0.3',
]


setup(
    name='varprot',
    version='{}'.format(VERSION),
    packages=find_packages(exclude=['tests', 'tests.*']),
    description='Sample specific variant protein database generation',
    install_requires=INSTALL_REQS,
    extras_require={
        'test': TEST_REQS,
        'dev': ['black', 'flake8'] + TEST_REQS,
    },
    tests_require=TEST_REQS,
    setup_requires=['pip>=9.0.0', 'setuptools>=36.0.0'],
    python_requires='>=3.6',
    test_suite='tests',
    entry_points={
        'console_scripts': [
            'varprot = varprot.main:main',
        ]
    },
)
