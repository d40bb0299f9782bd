from committee_attendance.database.bootstrap import SCHEMA_PATH, split_statements


def test_schema_splits_into_create_table_statements():
    statements = list(split_statements(SCHEMA_PATH.read_text(encoding="utf-8")))

    tables = [s.split()[5] for s in statements]
    assert tables == ["users", "committees", "committee_members", "meetings", "attendances"]
    assert all(s.startswith("CREATE TABLE IF NOT EXISTS") for s in statements)
    assert not any(s.endswith(";") for s in statements)


def test_split_ignores_comments_and_keeps_multiline_bodies():
    sql = "-- header\nCREATE TABLE a (\n    id INT\n);\n\n-- next\nCREATE TABLE b (id INT);\n"

    assert list(split_statements(sql)) == ["CREATE TABLE a (\n    id INT\n)", "CREATE TABLE b (id INT)"]
