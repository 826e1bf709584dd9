#!/usr/bin/env python3
"""
pg_split_dump -- setup script
"""

# This file is part of pg_split_dump


import re
import os
from setuptools import setup, find_packages

# Grab the version without importing the module
# or we will get import errors on install if prerequisites are still missing
fn = os.path.join(os.path.dirname(__file__), "splitdump/consts.py")
with open(fn) as f:
    m = re.search(r"""(?mi)^VERSION\s*=\s*["']+([^'"]+)["']+""", f.read())
if m:
    version = m.group(1)
else:
    raise ValueError("cannot find VERSION in the consts module")

# Read the description from the README
with open(os.path.join(os.path.dirname(__file__), "README.rst")) as f:
    readme = f.read()

classifiers = """
Development Status :: 4 - Beta
Environment :: Console
Intended Audience :: Developers
Intended Audience :: System Administrators
Operating System :: POSIX
Programming Language :: Python :: 3
Topic :: Database
Topic :: Software Development :: Version Control
Topic :: System :: Archiving :: Backup
Topic :: Utilities
"""

requirements = """
psycopg
PyYAML
jsonschema
"""

test_requirements = """
pytest
"""

setup(
    name="pg_split_dump",
    description=readme.splitlines()[0],
    long_description="\n".join(readme.splitlines()[2:]).lstrip(),
    python_requires=">=3.7",
    install_requires=requirements,
    extras_require={"test": test_requirements},
    packages=find_packages(exclude=["tests", "tests.*"]),
    entry_points={"console_scripts": ["pg_split_dump = splitdump.cli:script"]},
    classifiers=[x for x in classifiers.split("\n") if x],
    zip_safe=False,
    version=version,
)
