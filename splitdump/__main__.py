#!/usr/bin/env python3
"""
Package entry point (can be executed with python -m splitdump)

This file is part of pg_split_dump.
"""

from .cli import script

if __name__ == "__main__":
    script()
