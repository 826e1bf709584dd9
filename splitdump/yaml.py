#!/usr/bin/env python3
"""
YAML parser keeping track of line numbers.

This file is part of pg_split_dump.
"""

import yaml


class DictWithPos(dict):
    """
    A dict with attached filename and line numbers of its keys.
    """

    __slots__ = ("filename", "lineno", "itemlines")

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.filename = None
        self.lineno = None
        self.itemlines = {}


class PosLoader(yaml.SafeLoader):
    """
    YAML parser storing file name and line number of the parsed mappings.
    """

    def construct_yaml_map(self, node):
        data = DictWithPos()
        data.filename = node.start_mark.name
        data.lineno = node.start_mark.line + 1
        yield data
        data.update(self.construct_mapping(node))
        for knode, vnode in node.value:
            key = self.construct_object(knode)
            data.itemlines[key] = knode.start_mark.line + 1


PosLoader.add_constructor("tag:yaml.org,2002:map", PosLoader.construct_yaml_map)


def load_yaml(stream):
    """Load a yaml document from a string or a file."""
    return yaml.load(stream, Loader=PosLoader)
