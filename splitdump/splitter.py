#!/usr/bin/env python3

"""
Object to split a database dump.

This file is part of pg_split_dump.
"""

import logging

from .archive import ArchiveReader
from .classifier import Classifier
from .pgdump import PgDumpProcess

logger = logging.getLogger("splitdump.splitter")


def split_archive(file, aux_data):
    """
    Read a custom format archive from `file` and return its split tree.
    """
    reader = ArchiveReader(file)
    classifier = Classifier(aux_data)
    for entry in reader.entries():
        classifier.add_entry(entry)

    logger.info(
        "read %d entries from the dump of database %s",
        reader.header.num_entries,
        reader.header.dbname,
    )
    return classifier.tree


class Splitter:
    """
    The logic of a database split dump.
    """

    def __init__(self, reader, writer, pg_dump_binary="pg_dump"):
        self.reader = reader
        self.writer = writer
        self.pg_dump_binary = pg_dump_binary
        self.tree = None

    def perform_split(self):
        """
        Dump the database, split the dump, write the result.
        """
        self.read_dump()
        self.write_dump()

    def read_dump(self):
        """
        Dump the database and build the split tree.

        pg_dump runs on a snapshot exported by the reader, which reads the
        auxiliary data in the same snapshot.
        """
        snapshot_id = self.reader.export_snapshot()
        try:
            with PgDumpProcess.from_snapshot(
                self.pg_dump_binary, self.reader.dsn, snapshot_id
            ) as pg_dump:
                aux_data = self.reader.load_auxiliary_data()
                self.tree = split_archive(pg_dump, aux_data)
                pg_dump.finish()
        finally:
            self.reader.close()

    def write_dump(self):
        if self.writer is None:
            raise ValueError("no writer set")
        if self.tree is None:
            raise ValueError("no dump read")
        self.writer.write_tree(self.tree)
