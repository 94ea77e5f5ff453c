"""Schema bootstrap for the attendance, penalty and policy tables.

schema.sql only uses CREATE TABLE IF NOT EXISTS, so applying it twice is harmless.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Iterator, Mapping, Optional

import mysql.connector
import structlog

from .connection import DBConfig

SCHEMA_PATH = Path(__file__).with_name("schema.sql")

log = structlog.get_logger(__name__)

_LINE_COMMENT = re.compile(r"--[^\n]*")
_DB_SCOPED = re.compile(r"^\s*(CREATE\s+DATABASE|USE)\b", re.IGNORECASE)


def schema_statements(sql: str) -> Iterator[str]:
    """Split schema.sql into executable statements.

    CREATE DATABASE / USE lines are dropped so the file works for any configured
    database name. Semicolons inside string literals are not supported.
    """

    for chunk in _LINE_COMMENT.sub("", sql).split(";"):
        stmt = chunk.strip()
        if stmt and not _DB_SCOPED.match(stmt):
            yield stmt


def ensure_database_exists(db_config: Mapping[str, Any]) -> None:
    config = DBConfig.from_mapping(db_config)
    conn = mysql.connector.connect(**config.connect_kwargs(with_database=False))
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: Mapping[str, Any], *, schema_path: Optional[str | Path] = None) -> None:
    config = DBConfig.from_mapping(db_config)
    ensure_database_exists(db_config)
    path = Path(schema_path or SCHEMA_PATH)

    conn = mysql.connector.connect(**config.connect_kwargs())
    try:
        cur = conn.cursor()
        count = 0
        for stmt in schema_statements(path.read_text(encoding="utf-8")):
            cur.execute(stmt)
            count += 1
        conn.commit()
    finally:
        conn.close()
    log.info("schema_applied", database=config.database, statements=count, path=str(path))


def list_tables(db_config: Mapping[str, Any]) -> list[str]:
    conn = mysql.connector.connect(**DBConfig.from_mapping(db_config).connect_kwargs())
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
