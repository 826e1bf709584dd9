"""
Sorting of access privileges statements.

This file is part of pg_split_dump.
"""


def sort_acl(acl):
    """
    Split a string of GRANT/REVOKE statements and return them sorted.

    pg_dump emits privileges in an order depending on the catalog state, which
    makes comparing a database with one from version control noisy. Return a
    list of statements with the REVOKEs before the GRANTs, each group sorted,
    and an empty string at the end, standing for the blank line closing the
    definition.
    """
    parts = [entry + ";" for entry in acl.split(";\n") if entry]
    parts.sort(key=lambda s: (not s.startswith("REVOKE"), s))
    parts.append("")
    return parts
