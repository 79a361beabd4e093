"""CLI tests — init-db, create-user, hash-password via Click's CliRunner."""

import pytest
from click.testing import CliRunner

from kitchenhand.auth.password import verify_password
from kitchenhand.cli.main import main
from kitchenhand.config import load_settings


@pytest.fixture()
def cli_env(tmp_path, monkeypatch):
    monkeypatch.setenv("JWT_SECRET", "cli-test-secret-0123456789abcdef")
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}")
    monkeypatch.setenv("BCRYPT_ROUNDS", "4")
    monkeypatch.chdir(tmp_path)
    load_settings.cache_clear()
    yield
    load_settings.cache_clear()


def test_hash_password():
    result = CliRunner().invoke(main, ["hash-password", "--password", "s3cret!", "--rounds", "4"])
    assert result.exit_code == 0, result.output
    hashed = result.output.strip()
    assert hashed.startswith("$2b$04$")
    assert verify_password("s3cret!", hashed)


def test_create_user_flow(cli_env):
    runner = CliRunner()
    result = runner.invoke(main, ["init-db"])
    assert result.exit_code == 0, result.output

    result = runner.invoke(
        main, ["create-user", "head_chef", "chef@kitchen.test", "--password", "knives-out"]
    )
    assert result.exit_code == 0, result.output
    assert "Created user head_chef" in result.output

    again = runner.invoke(
        main, ["create-user", "head_chef", "other@kitchen.test", "--password", "knives-out"]
    )
    assert again.exit_code == 1
    assert "already exists" in again.output


def test_create_user_validates_input(cli_env):
    result = CliRunner().invoke(
        main, ["create-user", "head chef", "chef@kitchen.test", "--password", "knives-out"]
    )
    assert result.exit_code == 1
    assert "letters, numbers, and underscores" in result.output


def test_create_user_short_password(cli_env):
    result = CliRunner().invoke(
        main, ["create-user", "cook", "cook@kitchen.test", "--password", "abc"]
    )
    assert result.exit_code == 1
    assert "at least 6 characters" in result.output
