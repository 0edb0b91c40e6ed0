from __future__ import annotations

from hr_records.database.bootstrap import demo_user_rows, iter_sql_statements


def test_statements_split_outside_quotes():
    sql = "INSERT INTO t VALUES ('a;b');\nINSERT INTO t VALUES ('it\\'s');\nSELECT 1"
    assert list(iter_sql_statements(sql)) == [
        "INSERT INTO t VALUES ('a;b')",
        "INSERT INTO t VALUES ('it\\'s')",
        "SELECT 1",
    ]


def test_demo_users_cover_every_role():
    roles = {role.value for _, _, role in demo_user_rows()}
    assert roles == {"superadmin", "hrd", "finance"}
    emails = [email for _, email, _ in demo_user_rows()]
    assert len(emails) == len(set(emails))
