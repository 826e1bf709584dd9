#!/usr/bin/env python3
"""
Pretend to write a dump

This file is part of pg_split_dump.
"""

import logging

from .writer import Writer

logger = logging.getLogger("splitdump.dummywriter")


class DummyWriter(Writer):
    def begin_dump(self):
        logger.debug("start of dump")

    def end_dump(self):
        logger.debug("end of dump")

    def write_file(self, path, blocks):
        logger.info("would write %s (%d blocks)", "/".join(path), len(blocks))
