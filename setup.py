#!/usr/bin/env python

'''
setup.py file for phrp
'''

from setuptools import setup
import re
import os


# from https://packaging.python.org/guides/single-sourcing-package-version/

def read(rel_path):
    here = os.path.abspath(os.path.dirname(__file__))
    with open(os.path.join(here, rel_path), 'r') as fp:
        return fp.read()


def get_version(rel_path):
    for line in read(rel_path).splitlines():
        if line.startswith('__version__'):
            delim = '"' if '"' in line else "'"
            return line.split(delim)[1]
    else:
        raise RuntimeError("Unable to find version string.")


long_description = re.sub(r':py:\w+:`([^`]+)`',
        lambda m: '**{}**'.format(m.group(1)),
        read('README.rst') + '\n' + read('INSTALL'))


extras_require = {'DF': ['pandas>=0.17'],
                  'test': ['pandas>=0.17']}
extras_require['all'] = sorted(set(sum(extras_require.values(), [])))


setup(
    name               = 'phrp',
    version            = get_version('phrp/version.py'),
    description        = 'Peptide Hit Results Processor: converts search engine results to PHRP tables.',
    long_description   = long_description,
    author             = 'PHRP developers',
    packages           = ['phrp', 'phrp.auxiliary'],
    install_requires   = ['numpy', 'lxml'],
    extras_require     = extras_require,
    python_requires    = '>=3.6',
    classifiers        = ['Intended Audience :: Science/Research',
                          'Programming Language :: Python :: 3',
                          'Topic :: Scientific/Engineering :: Bio-Informatics',
                          'Topic :: Scientific/Engineering :: Chemistry',
                          'Topic :: Software Development :: Libraries'],
    license            = 'License :: OSI Approved :: Apache Software License',
    zip_safe           = False,
    )
