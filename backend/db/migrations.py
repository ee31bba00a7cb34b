"""Database migration utilities

Scripts live in a directory as ``*.sql`` files and run in lexical filename
order, each exactly once. Applied filenames are recorded in the
``schema_migrations`` ledger inside the same transaction as the script.

On Postgres a script goes to asyncpg in one piece, so DO blocks and function
bodies work as written. Other drivers (SQLite in tests) execute one
statement at a time, see split_statements.
"""
import logging
import re
from pathlib import Path
from typing import List

from sqlalchemy import Column, DateTime, Integer, MetaData, Table, Text, func, select
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

logger = logging.getLogger(__name__)

ledger_metadata = MetaData()

schema_migrations = Table(
    "schema_migrations",
    ledger_metadata,
    Column("id", Integer, primary_key=True),
    Column("name", Text, nullable=False, unique=True),
    Column("applied_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
)

_DOLLAR_TAG = re.compile(r"\$[A-Za-z_]*\$")


def split_statements(script: str) -> List[str]:
    """Split a script on top-level ``;``.

    Semicolons inside quoted strings, quoted identifiers, ``$tag$`` bodies and
    comments do not end a statement. ``--`` comments are dropped.
    """
    statements: List[str] = []
    buf: List[str] = []
    i, n = 0, len(script)
    while i < n:
        ch = script[i]
        if ch == "-" and script.startswith("--", i):
            end = script.find("\n", i)
            i = n if end == -1 else end
            continue
        if ch == "/" and script.startswith("/*", i):
            end = script.find("*/", i + 2)
            end = n if end == -1 else end + 2
            buf.append(script[i:end])
            i = end
            continue
        if ch in ("'", '"'):
            end = i + 1
            while end < n:
                if script[end] == ch:
                    # doubled quote is an escaped quote
                    if end + 1 < n and script[end + 1] == ch:
                        end += 2
                        continue
                    break
                end += 1
            buf.append(script[i:end + 1])
            i = end + 1
            continue
        if ch == "$":
            tag = _DOLLAR_TAG.match(script, i)
            if tag:
                close = script.find(tag.group(), tag.end())
                end = n if close == -1 else close + len(tag.group())
                buf.append(script[i:end])
                i = end
                continue
        if ch == ";":
            statements.append("".join(buf))
            buf = []
        else:
            buf.append(ch)
        i += 1
    statements.append("".join(buf))
    return [stmt.strip() for stmt in statements if stmt.strip()]


def pending_migrations(migrations_dir: Path, applied: set[str]) -> List[Path]:
    if not migrations_dir.is_dir():
        raise FileNotFoundError(f"Migrations directory not found: {migrations_dir}")
    files = sorted(migrations_dir.glob("*.sql"), key=lambda p: p.name)
    return [f for f in files if f.name not in applied]


async def execute_script(conn: AsyncConnection, script: str):
    """Run a whole script on an open transaction."""
    if conn.dialect.driver == "asyncpg":
        # asyncpg's argument-less execute() takes several statements at once
        raw = await conn.get_raw_connection()
        await raw.driver_connection.execute(script)
        return
    for statement in split_statements(script):
        await conn.exec_driver_sql(statement)


async def run_migrations(engine: AsyncEngine, migrations_dir: Path) -> List[str]:
    """Apply pending migration scripts and return the names that ran"""
    async with engine.begin() as conn:
        await conn.run_sync(ledger_metadata.create_all)
        result = await conn.execute(select(schema_migrations.c.name))
        applied = {row[0] for row in result.fetchall()}

    ran: List[str] = []
    for path in pending_migrations(Path(migrations_dir), applied):
        logger.info("Running migration: %s", path.name)
        script = path.read_text(encoding="utf-8")
        async with engine.begin() as conn:
            # The ledger row goes first so the transaction is open before the
            # script reaches the driver; a failing script rolls both back.
            await conn.execute(schema_migrations.insert().values(name=path.name))
            await execute_script(conn, script)
        ran.append(path.name)

    if not ran:
        logger.info("No pending migrations")
    return ran
