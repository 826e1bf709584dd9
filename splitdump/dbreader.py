#!/usr/bin/env python3

"""
Reading catalog information from a PostgreSQL database.

This file is part of pg_split_dump.
"""

import logging
from functools import lru_cache

import psycopg
from psycopg.rows import namedtuple_row

from .auxdata import AuxiliaryData
from .exceptions import DumpError

logger = logging.getLogger("splitdump.dbreader")


class DbReader:
    """
    Wrap a connection to the database to dump.

    The connection is in a read only, repeatable read transaction: the
    snapshot it exports is the one the auxiliary data is read from. The
    transaction must stay open until pg_dump has finished.
    """

    def __init__(self, dsn):
        self.dsn = dsn

    @property
    @lru_cache(maxsize=1)
    def connection(self):
        logger.debug("connecting to '%s'", self.dsn)
        try:
            cnn = psycopg.connect(self.dsn, row_factory=namedtuple_row)
        except Exception as e:
            raise DumpError("error connecting to the database: %s" % e)

        cnn.read_only = True
        cnn.isolation_level = psycopg.IsolationLevel.REPEATABLE_READ
        return cnn

    def cursor(self):
        return self.connection.cursor()

    def export_snapshot(self):
        """
        Return the id of a snapshot other sessions can use.
        """
        with self.cursor() as cur:
            try:
                cur.execute("select pg_export_snapshot() as snapshot")
            except psycopg.Error as e:
                raise DumpError("could not export a database snapshot: %s" % e)
            rv = cur.fetchone().snapshot

        logger.debug("exported snapshot %s", rv)
        return rv

    def load_auxiliary_data(self):
        """
        Return the `AuxiliaryData` of the database.
        """
        aux = AuxiliaryData()
        for rec in self._fetch_index_tables():
            aux.add_index_table(rec.oid, rec.table_name)
        for rec in self._fetch_view_definitions():
            aux.add_view_definition(rec.oid, rec.definition)
        for rec in self._fetch_trigger_functions():
            aux.add_trigger_function(rec.oid)

        return aux

    def close(self):
        """
        Terminate the transaction and the connection.
        """
        cnn = self.connection
        cnn.commit()
        cnn.close()

    def _fetch(self, what, query):
        logger.debug("fetching %s", what)
        with self.cursor() as cur:
            try:
                cur.execute(query)
            except psycopg.Error as e:
                raise DumpError("could not query %s: %s" % (what, e))
            return cur.fetchall()

    def _fetch_index_tables(self):
        return self._fetch(
            "indexes",
            """
select i.indexrelid as oid, r.relname as table_name
from pg_index i
join pg_class r on r.oid = i.indrelid
""",
        )

    def _fetch_view_definitions(self):
        return self._fetch(
            "views",
            """
select r.oid as oid, pg_get_viewdef(r.oid, true) as definition
from pg_class r
where r.relkind = 'v'
""",
        )

    def _fetch_trigger_functions(self):
        return self._fetch(
            "trigger functions",
            """
select p.oid as oid
from pg_proc p
where p.prorettype = 'pg_catalog.trigger'::regtype
""",
        )
