"""
Program constants.

This file is part of pg_split_dump.
"""

VERSION = "0.2.dev0"

# Archive format versions we know how to read, as (major, minor)
# https://github.com/postgres/postgres/blob/master/src/bin/pg_dump/pg_backup_archiver.h
MIN_DUMP_VERSION = (1, 12)
MAX_DUMP_VERSION = (1, 15)

# The compression field became a single byte (the algorithm)
DUMP_VERSION_COMPRESSION_ALGORITHM = (1, 15)
# The table access method was added to the entries
DUMP_VERSION_TABLEAM = (1, 14)

# oids of the system catalogs an entry can belong to
CATALOG_NONE = 0
CATALOG_PG_TYPE = 1247
CATALOG_PG_PROC = 1255
CATALOG_PG_CLASS = 1259
CATALOG_PG_DATABASE = 1262
CATALOG_PG_ATTRDEF = 2604
CATALOG_PG_CONSTRAINT = 2606
CATALOG_PG_NAMESPACE = 2615
CATALOG_PG_OPERATOR = 2617
CATALOG_PG_REWRITE = 2618
CATALOG_PG_TRIGGER = 2620
CATALOG_PG_EXTENSION = 3079
CATALOG_PG_PUBLICATION = 6104
CATALOG_PG_PUBLICATION_REL = 6106

INDEX_FILE = "index.sql"

# The schema every database has: its creation is not dumped
DEFAULT_SCHEMA = "public"

# Output formats
FORMAT_DIRECTORY = "d"
FORMAT_TAR = "t"
