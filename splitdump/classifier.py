#!/usr/bin/env python3

"""
Placement of the archive entries into the output tree.

This file is part of pg_split_dump.
"""

import logging

from . import consts
from .acl import sort_acl
from .exceptions import ClassifyError
from .splittree import SplitDumpDirectory

logger = logging.getLogger("splitdump.classifier")

# (catalog oid, desc) -> function returning the (path, blocks) of an entry
_routes = {}

# kind of a combo tag -> function returning the path of an entry
_combo_routes = {}


def route(catalog_id, *descs):
    """
    Decorator to register a method to classify entries with a certain desc.
    """

    def route_(f):
        for desc in descs:
            key = (catalog_id, desc)
            if key in _routes:
                raise ValueError("the entry type %s/%s is already routed" % key)
            _routes[key] = f
        return f

    return route_


def combo_route(kind):
    """
    Decorator to register a method to find the path from a combo tag.
    """

    def combo_route_(f):
        if kind in _combo_routes:
            raise ValueError("the combo tag kind %s is already routed" % kind)
        _combo_routes[kind] = f
        return f

    return combo_route_


class Classifier:
    """
    Build a tree of SQL files out of the entries of a schema dump.

    Entries must be added in the order they are found in the archive: the
    ACLs and comments of a view can be told from the ones of a table only if
    the view was added before.
    """

    def __init__(self, aux_data):
        self.aux_data = aux_data
        self.tree = SplitDumpDirectory()
        self.tree.files[consts.INDEX_FILE] = []

        # (schema, name) of the views seen so far
        self.views = set()

        # desc -> definition of the session settings seen so far
        self.settings = {}

    def add_entry(self, entry):
        """
        Add the content of an archive entry to the tree.
        """
        meth = _routes.get((entry.catalog_id, entry.desc))
        if meth is None:
            raise ClassifyError(
                "unknown catalog id %s / desc %s for entry %r"
                % (entry.catalog_id, entry.desc, entry)
            )

        path, blocks = meth(self, entry)
        if not path:
            logger.debug("dropping %s %s", entry.desc, entry.tag)
            return

        self._check_path(entry, path)

        logger.debug("adding %s %s to %s", entry.desc, entry.tag, "/".join(path))
        if self.tree.append(path, blocks) and path != [consts.INDEX_FILE]:
            self.tree.files[consts.INDEX_FILE].append("\\ir %s" % "/".join(path))

    def is_view(self, schema, name):
        return (schema, name) in self.views

    def _check_path(self, entry, path):
        # Names come from the database: they must stay inside the output
        for name in path:
            if name in ("", ".", "..") or "/" in name or "\0" in name:
                raise ClassifyError(
                    "invalid file name %r for %s entry %r" % (name, entry.desc, entry)
                )

    #
    # Routing of the entries (dynamic dispatch from `add_entry()`)
    #

    @route(consts.CATALOG_PG_DATABASE, "DATABASE")
    def _route_database(self, entry):
        return [], []

    @route(consts.CATALOG_NONE, "ENCODING", "STDSTRINGS", "SEARCHPATH")
    def _route_setting(self, entry):
        if entry.desc in self.settings:
            raise ClassifyError('more than one "%s" entry present' % entry.desc)

        blocks = [entry.definition]
        # Added once, after whatever session setting comes first: an archive
        # may carry only some of them, or none.
        if not self.settings:
            blocks.append("SET check_function_bodies = false;\n")

        self.settings[entry.desc] = entry.definition
        return [consts.INDEX_FILE], blocks

    @route(consts.CATALOG_NONE, "ACL")
    def _route_acl(self, entry):
        return self._get_combo_tag_path(entry), sort_acl(entry.definition)

    @route(consts.CATALOG_NONE, "COMMENT")
    def _route_comment(self, entry):
        return self._get_combo_tag_path(entry), [entry.definition]

    @route(consts.CATALOG_PG_NAMESPACE, "SCHEMA")
    def _route_schema(self, entry):
        if entry.tag == consts.DEFAULT_SCHEMA:
            return [], []
        return ["SCHEMAS", entry.tag + ".sql"], [entry.definition]

    @route(consts.CATALOG_PG_EXTENSION, "EXTENSION")
    def _route_extension(self, entry):
        return ["EXTENSIONS", entry.tag + ".sql"], [entry.definition]

    @route(consts.CATALOG_NONE, "SHELL TYPE")
    def _route_shell_type(self, entry):
        return self._schema_path(entry, "SHELL_TYPES"), [entry.definition]

    @route(consts.CATALOG_PG_TYPE, "TYPE")
    def _route_type(self, entry):
        return self._schema_path(entry, "TYPES"), [entry.definition]

    @route(consts.CATALOG_PG_TYPE, "DOMAIN")
    def _route_domain(self, entry):
        return self._schema_path(entry, "DOMAINS"), [entry.definition]

    @route(consts.CATALOG_PG_PROC, "FUNCTION")
    def _route_function(self, entry):
        if entry.object_id in self.aux_data.trigger_functions:
            subdir = "TRIGGER_FUNCTIONS"
        else:
            subdir = "FUNCTIONS"

        name = self._split_tag(entry, entry.tag, "(")[0]
        return (
            self._schema_path(entry, subdir, name),
            [entry.definition, self._owner_statement("FUNCTION", entry)],
        )

    @route(consts.CATALOG_PG_PROC, "AGGREGATE")
    def _route_aggregate(self, entry):
        name = self._split_tag(entry, entry.tag, "(")[0]
        return self._schema_path(entry, "FUNCTIONS", name), [entry.definition]

    @route(consts.CATALOG_PG_OPERATOR, "OPERATOR")
    def _route_operator(self, entry):
        return [entry.namespace, "operators.sql"], [entry.definition]

    @route(consts.CATALOG_PG_CLASS, "TABLE")
    def _route_table(self, entry):
        return (
            self._schema_path(entry, "TABLES"),
            [entry.definition, self._owner_statement("TABLE", entry)],
        )

    @route(consts.CATALOG_PG_CLASS, "INDEX")
    def _route_index(self, entry):
        table = self.aux_data.index_tables.get(entry.object_id)
        if table is None:
            raise ClassifyError(
                "table of index %s (oid %s) not found"
                % (entry.tag, entry.object_id)
            )
        return self._schema_path(entry, "TABLES", table), [entry.definition]

    @route(consts.CATALOG_PG_CONSTRAINT, "CONSTRAINT", "CHECK CONSTRAINT")
    @route(consts.CATALOG_PG_ATTRDEF, "DEFAULT")
    @route(consts.CATALOG_PG_TRIGGER, "TRIGGER")
    def _route_table_object(self, entry):
        # the tag is "table name"
        table = self._split_tag(entry, entry.tag, " ")[0]
        return self._schema_path(entry, "TABLES", table), [entry.definition]

    @route(consts.CATALOG_PG_CONSTRAINT, "FK CONSTRAINT")
    def _route_fk_constraint(self, entry):
        table = self._split_tag(entry, entry.tag, " ")[0]
        return (
            self._schema_path(entry, "FK_CONSTRAINTS", table),
            [entry.definition],
        )

    @route(consts.CATALOG_PG_CLASS, "SEQUENCE")
    def _route_sequence(self, entry):
        return (
            self._schema_path(entry, "SEQUENCES"),
            [entry.definition, self._owner_statement("SEQUENCE", entry)],
        )

    @route(consts.CATALOG_NONE, "SEQUENCE OWNED BY")
    def _route_sequence_owned_by(self, entry):
        return self._schema_path(entry, "SEQUENCES"), [entry.definition]

    @route(consts.CATALOG_PG_CLASS, "VIEW")
    def _route_view(self, entry):
        definition = self.aux_data.view_definitions.get(entry.object_id)
        if definition is None:
            raise ClassifyError(
                "definition of view %s (oid %s) not found"
                % (entry.tag, entry.object_id)
            )

        self.views.add((entry.namespace, entry.tag))

        return (
            self._schema_path(entry, "VIEWS"),
            [
                "CREATE OR REPLACE VIEW %s AS" % entry.tag,
                definition,
                self._owner_statement("VIEW", entry),
            ],
        )

    @route(consts.CATALOG_PG_REWRITE, "RULE")
    def _route_rule(self, entry):
        return self._schema_path(entry, "RULES"), [entry.definition]

    @route(consts.CATALOG_PG_PUBLICATION, "PUBLICATION")
    def _route_publication(self, entry):
        return (
            ["PUBLICATIONS", entry.tag, entry.tag + ".sql"],
            [entry.definition],
        )

    @route(consts.CATALOG_PG_PUBLICATION_REL, "PUBLICATION TABLE")
    def _route_publication_table(self, entry):
        # the tag is "publication table"
        pub, table = self._split_tag(entry, entry.tag, " ")
        return ["PUBLICATIONS", pub, table + ".sql"], [entry.definition]

    #
    # Paths of the ACL and COMMENT entries, whose tag is "KIND name"
    # (dynamic dispatch from `_get_combo_tag_path()`)
    #

    def _get_combo_tag_path(self, entry):
        kind, rest = self._split_tag(entry, entry.tag, " ")
        meth = _combo_routes.get(kind)
        if meth is None:
            raise ClassifyError(
                "unknown kind %s for %s entry %r" % (kind, entry.desc, entry)
            )
        return meth(self, entry, rest)

    @combo_route("SCHEMA")
    def _combo_schema(self, entry, name):
        return ["SCHEMAS", name + ".sql"]

    @combo_route("EXTENSION")
    def _combo_extension(self, entry, name):
        return ["EXTENSIONS", name + ".sql"]

    @combo_route("TYPE")
    def _combo_type(self, entry, name):
        return self._schema_path(entry, "TYPES", name)

    @combo_route("FUNCTION")
    def _combo_function(self, entry, signature):
        name = self._split_tag(entry, signature, "(")[0]
        return self._schema_path(entry, "FUNCTIONS", name)

    @combo_route("TABLE")
    def _combo_table(self, entry, name):
        # ACLs and comments on views are tagged as TABLE too
        if self.is_view(entry.namespace, name):
            return self._schema_path(entry, "VIEWS", name)
        else:
            return self._schema_path(entry, "TABLES", name)

    @combo_route("COLUMN")
    def _combo_column(self, entry, name):
        # the name is "table.column"
        table = self._split_tag(entry, name, ".")[0]
        return self._schema_path(entry, "TABLES", table)

    @combo_route("SEQUENCE")
    def _combo_sequence(self, entry, name):
        return self._schema_path(entry, "SEQUENCES", name)

    @combo_route("VIEW")
    def _combo_view(self, entry, name):
        return self._schema_path(entry, "VIEWS", name)

    #
    # Helpers
    #

    def _schema_path(self, entry, subdir, name=None):
        if name is None:
            name = entry.tag
        return [entry.namespace, subdir, name + ".sql"]

    def _owner_statement(self, kind, entry):
        return "ALTER %s %s.%s OWNER TO %s;\n" % (
            kind,
            entry.namespace,
            entry.tag,
            entry.owner,
        )

    def _split_tag(self, entry, tag, sep):
        """
        Split `tag` in two parts on the first `sep`.
        """
        rv = tag.split(sep, 1)
        if len(rv) != 2:
            raise ClassifyError(
                "invalid tag %r for %s entry %r: no %r found"
                % (tag, entry.desc, entry, sep)
            )
        return rv
