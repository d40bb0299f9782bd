from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import mysql.connector
from werkzeug.security import generate_password_hash

from ..core.enums import Role
from .connection import DBConfig

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"

DEMO_USERS = (
    ("Admin Demo", "admin@example.com", "admin123", Role.ADMIN),
    ("Member Demo", "member@example.com", "member123", Role.MEMBER),
)


def _open(target: DBConfig, *, server_only: bool = False):
    params = {
        "host": target.host,
        "port": target.port,
        "user": target.user,
        "password": target.password,
        "connection_timeout": target.connection_timeout,
    }
    if not server_only:
        params["database"] = target.database
    return mysql.connector.connect(**params)


def split_statements(sql: str) -> Iterator[str]:
    """Yield the DDL statements of a schema file.

    Statements end with ';' at the end of a line; '--' comment lines are dropped.
    """
    pending: list[str] = []
    for line in sql.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("--"):
            continue
        pending.append(line)
        if stripped.endswith(";"):
            yield "\n".join(pending).rstrip().rstrip(";")
            pending = []
    if pending:
        yield "\n".join(pending)


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    conn = _open(target, server_only=True)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path = SCHEMA_PATH) -> None:
    """Create the database if needed, then run every CREATE TABLE IF NOT EXISTS."""
    ensure_database_exists(db_config)
    statements = list(split_statements(Path(schema_path).read_text(encoding="utf-8")))

    conn = _open(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor()
        for statement in statements:
            cur.execute(statement)
        conn.commit()
    finally:
        conn.close()
    logger.info("Applied %d schema statements from %s", len(statements), schema_path)


def ensure_demo_users(db_config: dict) -> None:
    """Upsert one demo admin and one demo member, keyed on the unique email."""
    conn = _open(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor()
        cur.executemany(
            """
            INSERT INTO users (email, name, password_hash, role)
            VALUES (%s, %s, %s, %s)
            ON DUPLICATE KEY UPDATE
                name=VALUES(name),
                password_hash=VALUES(password_hash),
                role=VALUES(role)
            """,
            [
                (email, name, generate_password_hash(password), role.value)
                for name, email, password, role in DEMO_USERS
            ],
        )
        conn.commit()
    finally:
        conn.close()
    logger.info("Demo users ready: %s", ", ".join(email for _, email, _, _ in DEMO_USERS))


def list_tables(db_config: dict) -> list[str]:
    conn = _open(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
