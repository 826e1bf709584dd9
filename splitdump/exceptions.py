#!/usr/bin/env python3

"""
Program exceptions.

This file is part of pg_split_dump.
"""


class SplitDumpException(Exception):
    """A controlled exception raised by the script."""


class DumpReadError(SplitDumpException):
    """Error decoding the dump archive."""


class UnsupportedVersion(DumpReadError):
    """The archive was produced in a format version we can't read."""


class ClassifyError(SplitDumpException):
    """An archive entry can't be placed in the output tree."""


class DumpError(SplitDumpException):
    """Error dumping the database."""


class ConfigError(SplitDumpException):
    """Error parsing configuration."""


class OutputError(SplitDumpException):
    """Error writing the output."""
