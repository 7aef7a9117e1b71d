import os
import re

from setuptools import find_packages, setup


def get_version():
    with open(os.path.join(os.path.dirname(__file__), 'src', 'varannot', '__init__.py')) as fh:
        match = re.search(r"^__version__ = '(?P<version>[^']+)'", fh.read(), re.MULTILINE)
    return match.group('version')


def parse_md_readme():
    try:
        with open('README.md') as fh:
            return fh.read()
    except OSError:
        return ''


TEST_REQS = [
    'coverage>=4.2',
    'pytest',
    'pytest-cov',
]


INSTALL_REQS = [
    'biopython>=1.78',
    'braceexpand==0.1.2',
    'pandas>=1.1',
    'pysam>=0.15.2',
]


setup(
    name='varannot',
    version=get_version(),
    packages=find_packages(where='src', exclude=['tests']),
    package_dir={'': 'src'},
    description='Single-nucleotide variant annotation lookups against score and clinical annotation files',
    long_description=parse_md_readme(),
    long_description_content_type='text/markdown',
    install_requires=INSTALL_REQS,
    extras_require={
        'test': TEST_REQS,
        'dev': ['black', 'flake8'] + TEST_REQS,
    },
    tests_require=TEST_REQS,
    python_requires='>=3.7',
    test_suite='tests',
    entry_points={'console_scripts': ['varannot = varannot.main:main']},
)
