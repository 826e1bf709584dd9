"""
Configuration file handling.

This file is part of pg_split_dump.
"""

import re
import logging

import yaml
from jsonschema import Draft7Validator

from . import consts
from .yaml import load_yaml

logger = logging.getLogger("splitdump.config")

SCHEMA = """
$schema: "http://json-schema.org/draft-07/schema#"
title: pg_split_dump configuration
type: object
properties:
  dsn:
    description: connection string of the database to dump
    type: string
  pg_dump_binary:
    description: path of the pg_dump program to run
    type: string
    minLength: 1
  format:
    description: "output format: d (directory) or t (tar archive)"
    enum: [d, t]
additionalProperties: false
"""

validator = Draft7Validator(schema=yaml.load(SCHEMA, Loader=yaml.SafeLoader))

DEFAULTS = {
    "dsn": "",
    "pg_dump_binary": None,
    "format": None,
}


def load_config(filename):
    """
    Load and validate a configuration file.

    Return the content as a dict, validated according to the configuration
    schema, else None (and log about errors).
    """
    try:
        with open(filename) as f:
            conf = load_yaml(f)
    except Exception as e:
        logger.error("loading %s: %s", filename, e)
        return None

    # An empty file is a valid configuration
    if conf is None:
        conf = {}

    errors = get_config_errors(conf, filename)
    if errors:
        for error in errors:
            logger.error("%s", error)
        return None

    return conf


def get_config_errors(conf, filename="<no name>"):
    """
    Validate a configuration object and return the list of errors found.
    """
    rv = []

    # Give a clearer error message than what jsonschema would give
    # Something like: None is not of type 'object'
    if not isinstance(conf, dict):
        rv.append(located_message(None, filename, "config must be an object"))
        return rv

    for error in validator.iter_errors(conf):
        loc = location_from_error(conf, error)
        rv.append(located_message(loc, filename, error.message))

    # sort by line number
    def lineno(s):
        m = re.search(r":(\d+)", s)
        return int(m.group(1)) if m is not None else 0

    rv.sort(key=lineno)
    return rv


def merge_config(opt, conf=None):
    """
    Return the settings to use, from command line options and config.

    Options given on the command line override the config values.
    """
    rv = dict(DEFAULTS)
    if conf:
        rv.update(conf)
    for key in DEFAULTS:
        value = getattr(opt, key, None)
        if value is not None:
            rv[key] = value

    if rv["format"] is None and getattr(opt, "output", None):
        if opt.output.endswith(".tar"):
            rv["format"] = consts.FORMAT_TAR
        else:
            rv["format"] = consts.FORMAT_DIRECTORY

    return rv


def located_message(loc, filename, message):
    """
    Add location informations to a message string.
    """
    if loc:
        return "at %s: %s" % (loc, message)
    else:
        return "in %s: %s" % (filename, message)


def location_from_error(conf, error):
    """
    Return location information from a yaml validation error.
    """
    filename = getattr(conf, "filename", None)
    itemlines = getattr(conf, "itemlines", None)
    if not (filename and itemlines):
        return

    if error.validator == "additionalProperties":
        # The name of the unexpected attribute is only in the message
        for attr in itemlines:
            if attr not in validator.schema["properties"] and repr(attr) in (
                error.message
            ):
                return "%s:%s" % (filename, itemlines[attr])
        return

    if error.path and error.path[0] in itemlines:
        return "%s:%s: %s" % (filename, itemlines[error.path[0]], error.path[0])
