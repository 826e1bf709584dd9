#!/usr/bin/env python3

"""
Reading of pg_dump custom format archives.

Only the table of contents is read: a schema-only dump has no data blocks.

This file is part of pg_split_dump.
"""

import logging
from datetime import datetime

from . import consts
from .exceptions import DumpReadError, UnsupportedVersion

logger = logging.getLogger("splitdump.archive")

MAGIC = b"PGDMP"


class ArchiveHeader:
    """
    The prologue of a custom format archive.

    The static part (version and sizes) is known after the reader is
    created; the rest is filled by `ArchiveReader.read_header()`.
    """

    def __init__(self, magic, version, int_size, off_size, format):
        self.magic = magic
        self.version = version
        self.int_size = int_size
        self.off_size = off_size
        self.format = format

        self.compression = None
        self.created = None
        self.dbname = None
        self.remote_version = None
        self.pgdump_version = None
        self.num_entries = None

    def __repr__(self):
        major, minor, rev = self.version
        return "<%s %d.%d.%d at 0x%x>" % (
            self.__class__.__name__,
            major,
            minor,
            rev,
            id(self),
        )

    @property
    def dump_version(self):
        """The (major, minor) format version, the one relevant to the layout."""
        return self.version[:2]


class DumpEntry:
    """
    An entry of the archive table of contents.
    """

    __slots__ = (
        "dump_id",
        "catalog_id",
        "object_id",
        "tag",
        "desc",
        "definition",
        "namespace",
        "owner",
    )

    def __init__(
        self,
        catalog_id,
        object_id,
        tag,
        desc,
        definition="",
        namespace="",
        owner="",
        dump_id=None,
    ):
        self.dump_id = dump_id
        self.catalog_id = catalog_id
        self.object_id = object_id
        self.tag = tag
        self.desc = desc
        self.definition = definition
        self.namespace = namespace
        self.owner = owner

    def __repr__(self):
        return "<%s %s %r (%s/%s) at 0x%x>" % (
            self.__class__.__name__,
            self.desc,
            self.tag,
            self.catalog_id,
            self.object_id,
            id(self),
        )


class ArchiveReader:
    """
    Decode a custom format archive from a binary file-like object.

    The file only needs a blocking ``read(n)`` method: the archive is read
    forward only, so it can come from a pipe.
    """

    def __init__(self, file):
        self.file = file
        self.header = self._read_static_header()

        if not (
            consts.MIN_DUMP_VERSION
            <= self.header.dump_version
            <= consts.MAX_DUMP_VERSION
        ):
            raise UnsupportedVersion(
                "unsupported dump version (%d.%d)" % self.header.dump_version
            )

        self._entries_read = False
        self.read_header()

    def _read_static_header(self):
        magic = self._read_bytes(5, "magic")
        if magic != MAGIC:
            logger.debug("unexpected archive magic: %r", magic)
        major, minor, rev, int_size, off_size, format = self._read_bytes(
            6, "header"
        )
        logger.debug(
            "archive version %d.%d.%d, int size %d, offset size %d",
            major,
            minor,
            rev,
            int_size,
            off_size,
        )
        return ArchiveHeader(
            magic=magic,
            version=(major, minor, rev),
            int_size=int_size,
            off_size=off_size,
            format=format,
        )

    def read_header(self):
        """
        Read the part of the header following the version information.
        """
        h = self.header
        if h.num_entries is not None:
            raise ValueError("header already read")

        if self.dump_version >= consts.DUMP_VERSION_COMPRESSION_ALGORITHM:
            h.compression = self._read_bytes(1, "compression algorithm")[0]
        else:
            h.compression = self.read_int("compression")

        sec = self.read_int("timestamp seconds")
        minute = self.read_int("timestamp minutes")
        hour = self.read_int("timestamp hours")
        mday = self.read_int("timestamp day")
        mon = self.read_int("timestamp month") + 1
        year = self.read_int("timestamp year") + 1900
        self.read_int("timestamp dst flag")
        try:
            h.created = datetime(year, mon, mday, hour, minute, sec)
        except ValueError as e:
            raise DumpReadError("bad archive timestamp: %s" % e)

        h.dbname = self.read_str("database name")
        h.remote_version = self.read_str("remote version")
        h.pgdump_version = self.read_str("pg_dump version")

        num_entries = self.read_int("number of entries")
        if num_entries < 0:
            raise DumpReadError("bad number of entries: %s" % num_entries)
        h.num_entries = num_entries

        logger.debug(
            "dump of database %s created %s by pg_dump %s: %d entries",
            h.dbname,
            h.created,
            h.pgdump_version,
            h.num_entries,
        )

    @property
    def dump_version(self):
        return self.header.dump_version

    def entries(self):
        """
        Return an iterator on the entries of the archive.

        The iterator stops after the number of entries declared in the
        header, whatever follows in the file. It can be consumed only once.
        """
        if self._entries_read:
            raise ValueError("the archive entries have been already read")
        self._entries_read = True
        return self._iter_entries()

    def _iter_entries(self):
        for i in range(self.header.num_entries):
            yield self.read_entry()

    def read_entry(self):
        """
        Read an entry of the table of contents.
        """
        dump_id = self.read_int("dump id")
        self.read_int("had dumper")
        catalog_id = self.read_oid("catalog id")
        object_id = self.read_oid("object id")
        tag = self.read_str("tag")
        desc = self.read_str("desc")
        self.read_int("section")
        definition = self.read_str("definition")
        self.read_str("drop statement")
        self.read_str("copy statement")
        namespace = self.read_str("namespace")
        self.read_str("tablespace")
        if self.dump_version >= consts.DUMP_VERSION_TABLEAM:
            self.read_str("table access method")
        owner = self.read_str("owner")
        self.read_str("with oids")

        # dependencies, terminated by an empty string
        while self.read_str("dependency"):
            pass

        self.read_offset("data offset")

        return DumpEntry(
            dump_id=dump_id,
            catalog_id=catalog_id,
            object_id=object_id,
            tag=tag,
            desc=desc,
            definition=definition,
            namespace=namespace,
            owner=owner,
        )

    #
    # Primitive values
    #

    def read_int(self, what="int"):
        """
        Read a signed int: a sign byte followed by the absolute value.
        """
        sign = self._read_bytes(1, what)[0]
        value = int.from_bytes(
            self._read_bytes(self.header.int_size, what), "little"
        )
        if sign == 1:
            value = -value
        elif sign != 0:
            raise DumpReadError("bad sign byte reading %s: %d" % (what, sign))
        return value

    def read_offset(self, what="offset"):
        """
        Read a file offset: a flag byte followed by the unsigned offset.
        """
        self._read_bytes(1, what)
        return int.from_bytes(self._read_bytes(self.header.off_size, what), "little")

    def read_str(self, what="string"):
        """
        Read a string prefixed by its length.

        A length <= 0 represents a null string: return it as empty.
        """
        length = self.read_int(what)
        if length <= 0:
            return ""
        data = self._read_bytes(length, what)
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DumpReadError("bad string reading %s: %s" % (what, e))

    def read_oid(self, what="oid"):
        """
        Read an oid, which the archive stores as a string.
        """
        s = self.read_str(what)
        if not (s.isascii() and s.isdigit()) or int(s) > 0xFFFFFFFF:
            raise DumpReadError("bad oid reading %s: %r" % (what, s))
        return int(s)

    def _read_bytes(self, size, what):
        data = self.file.read(size)
        if len(data) < size:
            raise DumpReadError(
                "unexpected end of archive reading %s: wanted %d bytes, got %d"
                % (what, size, len(data))
            )
        return data
