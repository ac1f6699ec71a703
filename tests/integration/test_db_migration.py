from __future__ import annotations

import os
import sqlite3
import subprocess
import sys
from pathlib import Path


def _alembic(repo_root: Path, env: dict[str, str], *args: str) -> None:
    subprocess.run(
        [sys.executable, "-m", "alembic", "-c", "alembic.ini", *args],
        cwd=repo_root,
        env=env,
        check=True,
    )


def test_alembic_upgrade_and_downgrade(tmp_path: Path) -> None:
    repo_root = Path(__file__).resolve().parents[2]
    db_path = tmp_path / "migration_test.db"
    env = os.environ.copy()
    env["DATABASE_URL"] = f"sqlite:///{db_path}"

    _alembic(repo_root, env, "upgrade", "head")

    conn = sqlite3.connect(db_path)
    cur = conn.cursor()
    cur.execute("SELECT name FROM sqlite_master WHERE type='table'")
    tables = {row[0] for row in cur.fetchall()}
    assert {"applications", "documents", "preparation", "research", "chat_history"} <= tables

    cur.execute("PRAGMA table_info(chat_history)")
    assert "session_id" in {row[1] for row in cur.fetchall()}
    cur.execute("PRAGMA index_list(chat_history)")
    assert "ix_chat_history_session_id" in {row[1] for row in cur.fetchall()}

    _alembic(repo_root, env, "downgrade", "base")

    cur.execute("SELECT name FROM sqlite_master WHERE type='table' AND name='applications'")
    assert cur.fetchone() is None
    conn.close()
