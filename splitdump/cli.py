#!/usr/bin/env python3
"""
Split a PostgreSQL schema dump into a directory with one file per object.
"""

# This file is part of pg_split_dump.

import os
import sys
import shutil
import logging
from signal import SIGPIPE
from argparse import ArgumentParser, RawDescriptionHelpFormatter

from . import consts
from .config import load_config, merge_config
from .consts import VERSION
from .splitter import Splitter
from .dbreader import DbReader
from .dirwriter import DirectoryWriter
from .tarwriter import TarWriter
from .dummywriter import DummyWriter
from .exceptions import SplitDumpException, ConfigError

logger = logging.getLogger("splitdump")


def main(argv=None):
    """Run the program, raise exceptions."""
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s"
    )
    opt = parse_cmdline(argv)
    logger.setLevel(opt.loglevel)

    conf = None
    if opt.config_file:
        conf = load_config(opt.config_file)
        if conf is None:
            return 1

    settings = merge_config(opt, conf)

    pg_dump_binary = settings["pg_dump_binary"] or shutil.which("pg_dump")
    if not pg_dump_binary:
        raise ConfigError("pg_dump not found: please specify --pg-dump-binary")

    # Check before dumping, but the writers check again.
    if os.path.exists(opt.output):
        raise ConfigError("output %s already exists" % opt.output)

    writer = get_writer(opt.output, settings["format"], test=opt.test)
    reader = DbReader(settings["dsn"])
    splitter = Splitter(reader=reader, writer=writer, pg_dump_binary=pg_dump_binary)
    splitter.perform_split()


def get_writer(output, format, test=False):
    if test:
        return DummyWriter()
    elif format == consts.FORMAT_TAR:
        return TarWriter(output)
    elif format == consts.FORMAT_DIRECTORY:
        return DirectoryWriter(output)
    else:
        raise ConfigError("invalid output format: %s" % format)


def script():
    """Run the program and terminate the process."""
    try:
        sys.exit(main())

    except SplitDumpException as e:
        if str(e):
            logger.error("%s", e)
        sys.exit(1)

    except BrokenPipeError as e:
        logger.error("dump interrupted: %s", e)
        # Not entirely correct: might have been ESHUTDOWN
        sys.exit(SIGPIPE + 128)

    except Exception:
        logger.exception("unexpected error")
        sys.exit(1)

    except KeyboardInterrupt:
        logger.info("user interrupt")
        sys.exit(1)


def parse_cmdline(argv=None):
    parser = ArgumentParser(
        description=__doc__, formatter_class=RawDescriptionHelpFormatter
    )

    parser.add_argument("--version", action="version", version="%%(prog)s %s" % VERSION)

    parser.add_argument(
        "output",
        help="the directory or tar archive to create; it must not exist",
    )

    parser.add_argument(
        "--dsn",
        help="database connection string [default: from the environment]",
    )

    parser.add_argument(
        "--config",
        dest="config_file",
        metavar="FILE",
        help="yaml file with the program settings",
    )

    parser.add_argument(
        "--pg-dump-binary",
        metavar="PATH",
        help="the pg_dump program to run [default: pg_dump in the PATH]",
    )

    parser.add_argument(
        "--format",
        choices=[consts.FORMAT_DIRECTORY, consts.FORMAT_TAR],
        help="output format: directory or tar archive [default: tar if"
        " the output ends in '.tar', else directory]",
    )

    parser.add_argument(
        "--test",
        action="store_true",
        help="dump and split the database but don't write the output",
    )

    g = parser.add_mutually_exclusive_group()
    g.add_argument(
        "-q",
        "--quiet",
        help="talk less",
        dest="loglevel",
        action="store_const",
        const=logging.WARN,
        default=logging.INFO,
    )
    g.add_argument(
        "-v",
        "--verbose",
        help="talk more",
        dest="loglevel",
        action="store_const",
        const=logging.DEBUG,
        default=logging.INFO,
    )

    opt = parser.parse_args(argv)

    return opt
