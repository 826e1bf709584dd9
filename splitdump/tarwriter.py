#!/usr/bin/env python3
"""
Write a split dump into a tar archive.

This file is part of pg_split_dump.
"""

import io
import os
import time
import logging
import tarfile

from .writer import Writer
from .splittree import materialize
from .exceptions import OutputError

logger = logging.getLogger("splitdump.tarwriter")


class TarWriter(Writer):
    """
    Write every file of the dump as a member of a tar archive.

    Only regular files are added: no member is created for the directories.
    """

    def __init__(self, path):
        self.path = path
        self.archive = None
        self._outfile = None
        self._mtime = None

    def begin_dump(self):
        logger.debug("creating archive %s", self.path)
        try:
            # "x": the file must not exist
            self._outfile = open(self.path, "xb")
        except OSError as e:
            raise OutputError("could not create output archive: %s" % e)

        self.archive = tarfile.open(
            fileobj=self._outfile, mode="w", format=tarfile.GNU_FORMAT
        )
        self._mtime = int(time.time())

    def end_dump(self):
        try:
            self.archive.close()
            self._outfile.flush()
            os.fsync(self._outfile.fileno())
            self._outfile.close()
        except OSError as e:
            raise OutputError("could not write output archive %s: %s" % (self.path, e))
        logger.info("dump written into archive %s", self.path)

    def abort_dump(self):
        logger.debug("removing incomplete archive %s", self.path)
        # The tarfile is not closed: it would write the end of the archive
        self.archive = None
        if self._outfile is not None:
            self._outfile.close()
            self._outfile = None
            try:
                os.unlink(self.path)
            except OSError as e:
                logger.warning("could not remove %s: %s", self.path, e)

    def write_file(self, path, blocks):
        data = materialize(blocks).encode("utf-8")
        info = tarfile.TarInfo("/".join(path))
        info.size = len(data)
        info.mtime = self._mtime
        info.mode = 0o644
        try:
            self.archive.addfile(info, io.BytesIO(data))
        except OSError as e:
            raise OutputError("could not write output archive %s: %s" % (self.path, e))
