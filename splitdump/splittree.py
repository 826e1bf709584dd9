"""
The tree of files produced splitting a dump.

This file is part of pg_split_dump.
"""


class SplitDumpDirectory:
    """
    A directory of the output: subdirectories and files.

    A file is a list of text blocks; it is materialized with every block
    followed by a newline.
    """

    __slots__ = ("dirs", "files")

    def __init__(self):
        self.dirs = {}
        self.files = {}

    def __repr__(self):
        return "<%s %d dirs, %d files at 0x%x>" % (
            self.__class__.__name__,
            len(self.dirs),
            len(self.files),
            id(self),
        )

    def get_dir(self, path, create=False):
        """
        Return the subdirectory at `path` (a list of names).

        Return None if not found, unless `create` is true, in which case
        create all the missing directories.
        """
        rv = self
        for name in path:
            sub = rv.dirs.get(name)
            if sub is None:
                if not create:
                    return None
                sub = rv.dirs[name] = SplitDumpDirectory()
            rv = sub
        return rv

    def get_file(self, path):
        """
        Return the blocks of the file at `path` (a list of names), or None.
        """
        parent = self.get_dir(path[:-1])
        if parent is None:
            return None
        return parent.files.get(path[-1])

    def append(self, path, blocks):
        """
        Add text blocks to the end of the file at `path`.

        Create the file and its parent directories if needed. Return True if
        the file was created.
        """
        if not path:
            raise ValueError("empty file path")
        parent = self.get_dir(path[:-1], create=True)
        name = path[-1]
        if name in parent.files:
            parent.files[name].extend(blocks)
            return False
        else:
            parent.files[name] = list(blocks)
            return True

    def walk(self, prefix=()):
        """
        Generate (path, blocks) for every file in the tree.

        Paths are tuples of names, generated in a deterministic order: files
        first, then subdirectories, each sorted by name.
        """
        for name in sorted(self.files):
            yield prefix + (name,), self.files[name]
        for name in sorted(self.dirs):
            yield from self.dirs[name].walk(prefix + (name,))


def materialize(blocks):
    """
    Return the content of a file made of `blocks`.
    """
    return "".join(block + "\n" for block in blocks)
