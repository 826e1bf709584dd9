#!/usr/bin/env python3
"""
Write a split dump into a directory.

This file is part of pg_split_dump.
"""

import os
import logging

from .writer import Writer
from .splittree import materialize
from .exceptions import OutputError

logger = logging.getLogger("splitdump.dirwriter")


class DirectoryWriter(Writer):
    """
    Write every file of the dump into a directory tree rooted at `path`.

    The root directory must not exist.
    """

    def __init__(self, path):
        self.path = path

    def begin_dump(self):
        logger.debug("creating directory %s", self.path)
        try:
            os.mkdir(self.path)
        except OSError as e:
            raise OutputError("could not create output directory: %s" % e)

    def end_dump(self):
        logger.info("dump written into directory %s", self.path)

    def write_file(self, path, blocks):
        dirname = os.path.join(self.path, *path[:-1])
        fn = os.path.join(dirname, path[-1])
        try:
            os.makedirs(dirname, exist_ok=True)
            with open(fn, "w", encoding="utf-8", newline="") as f:
                f.write(materialize(blocks))
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            raise OutputError("could not write output file %s: %s" % (fn, e))

    def abort_dump(self):
        logger.warning("incomplete output left in directory %s", self.path)
