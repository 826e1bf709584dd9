"""
Catalog information the archive doesn't carry.

This file is part of pg_split_dump.
"""

from .exceptions import DumpError


class AuxiliaryData:
    """
    Lookup tables queried from the database the archive was dumped from.

    The data must come from the same snapshot of the dump, so that every oid
    found in the archive can be found here.
    """

    def __init__(self):
        # index oid -> name of the table indexed
        self.index_tables = {}
        # view oid -> pretty-printed view definition
        self.view_definitions = {}
        # oids of the functions returning trigger
        self.trigger_functions = set()

    def add_index_table(self, oid, table_name):
        if oid in self.index_tables:
            raise DumpError("oid %s seen twice in pg_index" % oid)
        self.index_tables[oid] = table_name

    def add_view_definition(self, oid, definition):
        if oid in self.view_definitions:
            raise DumpError("oid %s seen twice in pg_class" % oid)
        self.view_definitions[oid] = definition

    def add_trigger_function(self, oid):
        if oid in self.trigger_functions:
            raise DumpError("oid %s seen twice in pg_proc" % oid)
        self.trigger_functions.add(oid)
