import pytest

from splitdump.archive import DumpEntry
from splitdump.exceptions import ClassifyError


def entry(catalog_id, desc, tag, definition=None, namespace="public", **kwargs):
    if definition is None:
        definition = "-- %s %s\n" % (desc, tag)
    kwargs.setdefault("owner", "alice")
    kwargs.setdefault("object_id", 0)
    return DumpEntry(
        catalog_id=catalog_id,
        tag=tag,
        desc=desc,
        definition=definition,
        namespace=namespace,
        **kwargs
    )


def get_file(classifier, path):
    return classifier.tree.get_file(path.split("/"))


def get_index(classifier):
    return get_file(classifier, "index.sql")


def test_empty(classifier):
    assert get_index(classifier) == []
    assert not classifier.tree.dirs


def test_database_dropped(classifier):
    classifier.add_entry(entry(1262, "DATABASE", "testdb", namespace=""))
    assert get_index(classifier) == []
    assert not classifier.tree.dirs


def test_unknown_entry(classifier):
    with pytest.raises(ClassifyError, match="unknown"):
        classifier.add_entry(entry(1259, "MATERIALIZED VIEW", "mv"))

    # the right desc but a different catalog is unknown too
    with pytest.raises(ClassifyError, match="unknown"):
        classifier.add_entry(entry(1262, "TABLE", "t"))


def test_session_settings(classifier):
    classifier.add_entry(
        entry(0, "ENCODING", "ENCODING", "SET client_encoding = 'UTF8';\n")
    )
    classifier.add_entry(
        entry(
            0, "STDSTRINGS", "STDSTRINGS", "SET standard_conforming_strings = 'on';\n"
        )
    )
    classifier.add_entry(
        entry(
            0,
            "SEARCHPATH",
            "SEARCHPATH",
            "SELECT pg_catalog.set_config('search_path', '', false);\n",
        )
    )
    assert get_index(classifier) == [
        "SET client_encoding = 'UTF8';\n",
        "SET check_function_bodies = false;\n",
        "SET standard_conforming_strings = 'on';\n",
        "SELECT pg_catalog.set_config('search_path', '', false);\n",
    ]
    assert not classifier.tree.dirs


@pytest.mark.parametrize("desc", ["ENCODING", "STDSTRINGS", "SEARCHPATH"])
def test_session_setting_twice(classifier, desc):
    classifier.add_entry(entry(0, desc, desc, "SET foo = 1;\n"))
    with pytest.raises(ClassifyError, match='more than one "%s"' % desc):
        classifier.add_entry(entry(0, desc, desc, "SET foo = 2;\n"))


def test_public_schema_dropped(classifier):
    classifier.add_entry(entry(2615, "SCHEMA", "public", namespace=""))
    assert get_index(classifier) == []
    assert not classifier.tree.dirs


def test_schema(classifier):
    classifier.add_entry(entry(2615, "SCHEMA", "app", "CREATE SCHEMA app;\n", ""))
    assert get_file(classifier, "SCHEMAS/app.sql") == ["CREATE SCHEMA app;\n"]
    assert get_index(classifier) == ["\\ir SCHEMAS/app.sql"]


@pytest.mark.parametrize(
    "catalog_id, desc, tag, path",
    [
        (3079, "EXTENSION", "hstore", "EXTENSIONS/hstore.sql"),
        (0, "SHELL TYPE", "mytype", "public/SHELL_TYPES/mytype.sql"),
        (1247, "TYPE", "mytype", "public/TYPES/mytype.sql"),
        (1247, "DOMAIN", "posint", "public/DOMAINS/posint.sql"),
        (1255, "AGGREGATE", "mysum(integer)", "public/FUNCTIONS/mysum.sql"),
        (2617, "OPERATOR", "===(integer, integer)", "public/operators.sql"),
        (2606, "CONSTRAINT", "users users_pkey", "public/TABLES/users.sql"),
        (2606, "CHECK CONSTRAINT", "users a_b", "public/TABLES/users.sql"),
        (2604, "DEFAULT", "users id", "public/TABLES/users.sql"),
        (2620, "TRIGGER", "users trg", "public/TABLES/users.sql"),
        (2606, "FK CONSTRAINT", "users users_fk", "public/FK_CONSTRAINTS/users.sql"),
        (0, "SEQUENCE OWNED BY", "users_id_seq", "public/SEQUENCES/users_id_seq.sql"),
        (2618, "RULE", "users myrule", "public/RULES/users myrule.sql"),
        (6104, "PUBLICATION", "mypub", "PUBLICATIONS/mypub/mypub.sql"),
        (6106, "PUBLICATION TABLE", "mypub users", "PUBLICATIONS/mypub/users.sql"),
    ],
)
def test_definition_only(classifier, catalog_id, desc, tag, path):
    e = entry(catalog_id, desc, tag)
    classifier.add_entry(e)
    assert get_file(classifier, path) == [e.definition]
    assert get_index(classifier) == ["\\ir " + path]


@pytest.mark.parametrize(
    "desc, kind, subdir",
    [("TABLE", "TABLE", "TABLES"), ("SEQUENCE", "SEQUENCE", "SEQUENCES")],
)
def test_owner_statement(classifier, desc, kind, subdir):
    classifier.add_entry(entry(1259, desc, "obj", "CREATE %s obj;\n" % kind))
    assert get_file(classifier, "public/%s/obj.sql" % subdir) == [
        "CREATE %s obj;\n" % kind,
        "ALTER %s public.obj OWNER TO alice;\n" % kind,
    ]


@pytest.mark.parametrize(
    "trigger, subdir", [(True, "TRIGGER_FUNCTIONS"), (False, "FUNCTIONS")]
)
def test_function(classifier, aux_data, trigger, subdir):
    if trigger:
        aux_data.add_trigger_function(16390)
    aux_data.add_trigger_function(99999)

    classifier.add_entry(
        entry(
            1255,
            "FUNCTION",
            "compute_total(integer, integer)",
            "CREATE FUNCTION public.compute_total(integer, integer) ...;\n",
            object_id=16390,
        )
    )
    path = "public/%s/compute_total.sql" % subdir
    assert get_file(classifier, path) == [
        "CREATE FUNCTION public.compute_total(integer, integer) ...;\n",
        "ALTER FUNCTION public.compute_total(integer, integer) OWNER TO alice;\n",
    ]
    assert get_index(classifier) == ["\\ir " + path]


def test_function_overloads(classifier):
    classifier.add_entry(entry(1255, "FUNCTION", "f(integer)", "CREATE f1;\n"))
    classifier.add_entry(entry(1255, "FUNCTION", "f(text)", "CREATE f2;\n"))
    assert get_file(classifier, "public/FUNCTIONS/f.sql") == [
        "CREATE f1;\n",
        "ALTER FUNCTION public.f(integer) OWNER TO alice;\n",
        "CREATE f2;\n",
        "ALTER FUNCTION public.f(text) OWNER TO alice;\n",
    ]
    assert get_index(classifier) == ["\\ir public/FUNCTIONS/f.sql"]


def test_function_bad_tag(classifier):
    with pytest.raises(ClassifyError, match="invalid tag"):
        classifier.add_entry(entry(1255, "FUNCTION", "nope"))


@pytest.mark.parametrize(
    "catalog_id, desc",
    [
        (2606, "CONSTRAINT"),
        (2606, "FK CONSTRAINT"),
        (2604, "DEFAULT"),
        (2620, "TRIGGER"),
        (6106, "PUBLICATION TABLE"),
    ],
)
def test_table_object_bad_tag(classifier, catalog_id, desc):
    with pytest.raises(ClassifyError, match="invalid tag"):
        classifier.add_entry(entry(catalog_id, desc, "nospace"))


def test_index(classifier, aux_data):
    aux_data.add_index_table(16400, "users")
    classifier.add_entry(entry(1259, "TABLE", "users", "CREATE TABLE users ();\n"))
    classifier.add_entry(
        entry(
            1259, "INDEX", "users_idx", "CREATE INDEX users_idx ...;\n", object_id=16400
        )
    )
    assert get_file(classifier, "public/TABLES/users.sql") == [
        "CREATE TABLE users ();\n",
        "ALTER TABLE public.users OWNER TO alice;\n",
        "CREATE INDEX users_idx ...;\n",
    ]
    assert get_index(classifier) == ["\\ir public/TABLES/users.sql"]


def test_index_unknown(classifier, aux_data):
    aux_data.add_index_table(16400, "users")
    with pytest.raises(ClassifyError, match="users_idx"):
        classifier.add_entry(entry(1259, "INDEX", "users_idx", object_id=16401))


def test_view(classifier, aux_data):
    aux_data.add_view_definition(16500, " SELECT users.id\n   FROM users;")
    classifier.add_entry(
        entry(1259, "VIEW", "v", "CREATE VIEW v AS SELECT ...;\n", object_id=16500)
    )
    assert get_file(classifier, "public/VIEWS/v.sql") == [
        "CREATE OR REPLACE VIEW v AS",
        " SELECT users.id\n   FROM users;",
        "ALTER VIEW public.v OWNER TO alice;\n",
    ]
    assert classifier.is_view("public", "v")
    assert not classifier.is_view("other", "v")


def test_view_unknown(classifier, aux_data):
    with pytest.raises(ClassifyError, match="view v"):
        classifier.add_entry(entry(1259, "VIEW", "v", object_id=16500))


@pytest.mark.parametrize(
    "tag, path",
    [
        ("SCHEMA app", "SCHEMAS/app.sql"),
        ("EXTENSION hstore", "EXTENSIONS/hstore.sql"),
        ("TYPE mytype", "public/TYPES/mytype.sql"),
        ("FUNCTION f(integer, text)", "public/FUNCTIONS/f.sql"),
        ("TABLE users", "public/TABLES/users.sql"),
        ("COLUMN users.name", "public/TABLES/users.sql"),
        ("SEQUENCE users_id_seq", "public/SEQUENCES/users_id_seq.sql"),
        ("VIEW v", "public/VIEWS/v.sql"),
    ],
)
def test_comment(classifier, tag, path):
    e = entry(0, "COMMENT", tag, "COMMENT ON ... IS 'hi';\n")
    classifier.add_entry(e)
    assert get_file(classifier, path) == ["COMMENT ON ... IS 'hi';\n"]
    assert get_index(classifier) == ["\\ir " + path]


def test_acl(classifier):
    classifier.add_entry(
        entry(
            0,
            "ACL",
            "TABLE users",
            "GRANT SELECT ON TABLE public.users TO bob;\n"
            "REVOKE ALL ON TABLE public.users FROM PUBLIC;\n",
        )
    )
    assert get_file(classifier, "public/TABLES/users.sql") == [
        "REVOKE ALL ON TABLE public.users FROM PUBLIC;",
        "GRANT SELECT ON TABLE public.users TO bob;",
        "",
    ]


@pytest.mark.parametrize("desc", ["ACL", "COMMENT"])
@pytest.mark.parametrize(
    "tag", ["nospace", "WAT foo", "FUNCTION noparens", "COLUMN nodot"]
)
def test_combo_tag_bad(classifier, desc, tag):
    with pytest.raises(ClassifyError):
        classifier.add_entry(entry(0, desc, tag, "GRANT ALL ON foo TO bar;\n"))


@pytest.mark.parametrize("desc", ["ACL", "COMMENT"])
def test_combo_tag_view(classifier, aux_data, desc):
    aux_data.add_view_definition(16500, " SELECT 1;")
    classifier.add_entry(entry(1259, "VIEW", "v", object_id=16500))
    classifier.add_entry(
        entry(0, desc, "TABLE v", "GRANT SELECT ON TABLE public.v TO bob;\n")
    )

    blocks = get_file(classifier, "public/VIEWS/v.sql")
    assert "GRANT SELECT ON TABLE public.v TO bob;" in "\n".join(blocks)
    assert get_file(classifier, "public/TABLES/v.sql") is None
    assert get_index(classifier) == ["\\ir public/VIEWS/v.sql"]


def test_combo_tag_view_other_schema(classifier, aux_data):
    aux_data.add_view_definition(16500, " SELECT 1;")
    classifier.add_entry(entry(1259, "VIEW", "v", object_id=16500, namespace="app"))
    classifier.add_entry(
        entry(0, "ACL", "TABLE v", "GRANT ALL ON TABLE public.v TO bob;\n")
    )
    assert get_file(classifier, "app/VIEWS/v.sql")
    assert get_file(classifier, "public/TABLES/v.sql")


def test_combo_tag_view_order_dependency(classifier, aux_data):
    # An ACL found before its view can't be told from the one of a table
    aux_data.add_view_definition(16500, " SELECT 1;")
    classifier.add_entry(
        entry(0, "ACL", "TABLE v", "GRANT SELECT ON TABLE public.v TO bob;\n")
    )
    classifier.add_entry(entry(1259, "VIEW", "v", object_id=16500))

    assert get_file(classifier, "public/TABLES/v.sql") == [
        "GRANT SELECT ON TABLE public.v TO bob;",
        "",
    ]
    assert get_file(classifier, "public/VIEWS/v.sql")
    assert get_index(classifier) == [
        "\\ir public/TABLES/v.sql",
        "\\ir public/VIEWS/v.sql",
    ]


@pytest.mark.parametrize("acl_first", [False, True])
def test_table_acl_order(classifier, acl_first):
    table = entry(1259, "TABLE", "users", "CREATE TABLE users ();\n")
    acl = entry(0, "ACL", "TABLE users", "GRANT SELECT ON TABLE public.users TO bob;\n")
    entries = [acl, table] if acl_first else [table, acl]
    for e in entries:
        classifier.add_entry(e)

    blocks = get_file(classifier, "public/TABLES/users.sql")
    assert sorted(blocks) == sorted(
        [
            "CREATE TABLE users ();\n",
            "ALTER TABLE public.users OWNER TO alice;\n",
            "GRANT SELECT ON TABLE public.users TO bob;",
            "",
        ]
    )
    assert get_file(classifier, "public/VIEWS/users.sql") is None
    assert get_index(classifier) == ["\\ir public/TABLES/users.sql"]


def test_index_order(classifier, aux_data):
    aux_data.add_index_table(16400, "b")
    classifier.add_entry(
        entry(0, "ENCODING", "ENCODING", "SET client_encoding = 'UTF8';\n")
    )
    classifier.add_entry(entry(2615, "SCHEMA", "app", namespace=""))
    classifier.add_entry(entry(1259, "TABLE", "b"))
    classifier.add_entry(entry(1259, "TABLE", "a"))
    classifier.add_entry(entry(1259, "INDEX", "b_idx", object_id=16400))
    classifier.add_entry(entry(2606, "FK CONSTRAINT", "a a_b_fkey"))
    classifier.add_entry(entry(2606, "FK CONSTRAINT", "a a_c_fkey"))
    assert get_index(classifier) == [
        "SET client_encoding = 'UTF8';\n",
        "SET check_function_bodies = false;\n",
        "\\ir SCHEMAS/app.sql",
        "\\ir public/TABLES/b.sql",
        "\\ir public/TABLES/a.sql",
        "\\ir public/FK_CONSTRAINTS/a.sql",
    ]


@pytest.mark.parametrize(
    "namespace, tag",
    [
        ("..", "evil"),
        (".", "evil"),
        ("", "evil"),
        ("public", "a/b"),
        ("a/b", "t"),
    ],
)
def test_bad_file_name(classifier, namespace, tag):
    with pytest.raises(ClassifyError, match="invalid file name"):
        classifier.add_entry(entry(1259, "TABLE", tag, namespace=namespace))

    assert get_index(classifier) == []
    assert not classifier.tree.dirs


@pytest.mark.parametrize(
    "catalog_id, desc, tag",
    [
        (2615, "SCHEMA", "a/b"),
        (3079, "EXTENSION", "x/y"),
        (6104, "PUBLICATION", ".."),
        (6106, "PUBLICATION TABLE", "pub ../t"),
    ],
)
def test_bad_file_name_no_schema(classifier, catalog_id, desc, tag):
    with pytest.raises(ClassifyError, match="invalid file name"):
        classifier.add_entry(entry(catalog_id, desc, tag, namespace=""))


def test_bad_file_name_combo_tag(classifier):
    with pytest.raises(ClassifyError, match="invalid file name"):
        classifier.add_entry(entry(0, "COMMENT", "SCHEMA a/b", namespace=""))
