#!/usr/bin/env python3

"""
Running pg_dump as a child process.

This file is part of pg_split_dump.
"""

import logging
import threading
import subprocess as sp

from .exceptions import DumpError

logger = logging.getLogger("splitdump.pgdump")


class PgDumpProcess:
    """
    A running pg_dump, whose output can be read as a binary file.

    The stderr of the process is collected in a thread: reading it only at the
    end may deadlock if the process writes a lot there. When the output is
    finished the exit status is checked: if the process failed `DumpError` is
    raised, reporting the stderr content.
    """

    def __init__(self, cmdline):
        self.cmdline = cmdline
        logger.debug("running %s", cmdline[0])
        try:
            self.proc = sp.Popen(
                cmdline, stdin=sp.DEVNULL, stdout=sp.PIPE, stderr=sp.PIPE
            )
        except OSError as e:
            raise DumpError("could not start pg_dump: %s" % e)

        self.stderr_lines = []
        self._stderr_thread = threading.Thread(target=self._read_stderr, daemon=True)
        self._stderr_thread.start()
        self._finished = False

    @classmethod
    def from_snapshot(cls, pg_dump_binary, dsn, snapshot_id):
        """
        Start a schema-only dump of the database at `dsn` in a snapshot.
        """
        cmdline = [
            pg_dump_binary,
            "--schema-only",
            "--format",
            "custom",
            "--snapshot",
            snapshot_id,
            "--dbname",
            dsn,
        ]
        return cls(cmdline)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def read(self, size):
        data = self.proc.stdout.read(size)
        if len(data) < size:
            self._check_exit()
        return data

    def finish(self):
        """
        Discard the rest of the output and verify the process terminated fine.
        """
        if self._finished:
            return
        while self.proc.stdout.read(8192):
            pass
        self._check_exit()

    def close(self):
        """
        Terminate the process if still running and release its resources.
        """
        if self.proc.poll() is None:
            logger.debug("killing pg_dump process %s", self.proc.pid)
            self.proc.kill()
            self.proc.wait()
        self.proc.stdout.close()
        self._stderr_thread.join()
        self.proc.stderr.close()

    def _read_stderr(self):
        for line in self.proc.stderr:
            self.stderr_lines.append(line.decode("utf-8", "replace").rstrip("\n"))

    def _check_exit(self):
        if self._finished:
            return
        self._finished = True

        self._stderr_thread.join()
        rv = self.proc.wait()
        if rv != 0:
            msg = ["pg_dump failed with exit status %s" % rv]
            if self.stderr_lines:
                msg.append(" with the following output:\n")
                msg.extend("\n    %s" % line for line in self.stderr_lines)
            raise DumpError("".join(msg))

        for line in self.stderr_lines:
            logger.warning("pg_dump: %s", line)
