#!/usr/bin/env python3
"""
Writers base class

This file is part of pg_split_dump.
"""

from abc import ABC, abstractmethod


class Writer(ABC):
    """
    The base class of an object to write a split dump.
    """

    def write_tree(self, tree):
        """
        Write all the files of a `SplitDumpDirectory`.
        """
        self.begin_dump()
        try:
            for path, blocks in tree.walk():
                self.write_file(path, blocks)
            self.end_dump()
        except Exception:
            self.abort_dump()
            raise

    @abstractmethod
    def begin_dump(self):
        pass

    @abstractmethod
    def end_dump(self):
        pass

    @abstractmethod
    def write_file(self, path, blocks):
        pass

    def abort_dump(self):
        """
        Release the resources of a dump failed after `begin_dump()`.
        """
        pass
