#!/usr/bin/env python

"""Distutils setup file"""

from setuptools import setup, find_packages

# Metadata
PACKAGE_NAME = "Multis"
PACKAGE_VERSION = "0.1.0"

setup(
    name=PACKAGE_NAME,
    version=PACKAGE_VERSION,

    description="Narrowness-ranked multiple dispatch with refinement predicates",
    license="PSF or ZPL",

    python_requires=">=3.8",
    test_suite  = 'multis.tests.test_suite',
    extras_require = {'test': ['pytest']},
    package_dir = {'':'src'},
    packages    = find_packages('src'),
)
