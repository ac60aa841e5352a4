"""Integration tests for the database management CLI.

Each command runs in its own interpreter, in a scratch directory, so the
relative SQLite path of the test overlay lands there and the domain the
test session has already initialized is left alone.
"""

import os
import subprocess
import sys
from pathlib import Path

import pytest
from sqlalchemy import create_engine, inspect

SRC_DIR = Path(__file__).resolve().parents[3] / "src"


@pytest.fixture
def run_manage(tmp_path):
    def run(*args):
        env = {**os.environ, "PROTEAN_ENV": "test", "PYTHONPATH": str(SRC_DIR)}
        return subprocess.run(
            [sys.executable, str(SRC_DIR / "manage.py"), *args],
            cwd=tmp_path,
            env=env,
            capture_output=True,
            text=True,
            timeout=120,
        )

    return run


def _table_names(database_file):
    engine = create_engine(f"sqlite:///{database_file}")
    try:
        return set(inspect(engine).get_table_names())
    finally:
        engine.dispose()


class TestManageCLI:
    def test_setup_and_drop(self, run_manage, tmp_path):
        database_file = tmp_path / "tablerank_test.db"

        result = run_manage("setup-db")
        assert result.returncode == 0, result.stderr
        assert "Done." in result.stdout
        assert {"establishment", "menu_item", "review", "reaction"} <= _table_names(database_file)

        result = run_manage("drop-db")
        assert result.returncode == 0, result.stderr
        assert _table_names(database_file) == set()

    def test_recompute_ratings_on_empty_store(self, run_manage):
        assert run_manage("setup-db").returncode == 0

        result = run_manage("recompute-ratings")

        assert result.returncode == 0, result.stderr
        assert "0 establishment(s) refreshed." in result.stdout

    def test_env_flag_selects_overlay(self, run_manage, tmp_path):
        result = run_manage("--env", "test", "setup-db")

        assert result.returncode == 0, result.stderr
        assert (tmp_path / "tablerank_test.db").exists()

    def test_command_is_required(self):
        import manage

        with pytest.raises(SystemExit):
            manage.main([])
