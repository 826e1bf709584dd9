"""
Split a PostgreSQL schema dump into one file per object.

This file is part of pg_split_dump.
"""
