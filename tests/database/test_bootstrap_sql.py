from src.school_system.school_system.database.bootstrap import iter_sql_statements


def test_splits_on_semicolons_outside_quotes():
    sql = "CREATE TABLE a (x INT);\nINSERT INTO a VALUES ('x;y');\n INSERT INTO a VALUES (\"q\\\";\");"

    statements = list(iter_sql_statements(sql))

    assert statements == [
        "CREATE TABLE a (x INT)",
        "INSERT INTO a VALUES ('x;y')",
        'INSERT INTO a VALUES ("q\\";")',
    ]


def test_trailing_statement_without_semicolon():
    assert list(iter_sql_statements("SELECT 1; SELECT 2")) == ["SELECT 1", "SELECT 2"]
