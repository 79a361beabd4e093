"""Settings tests — env vars, defaults, startup validation."""

import pytest
from pydantic import ValidationError

from kitchenhand.config import Settings


def test_missing_jwt_secret_fails(monkeypatch):
    monkeypatch.delenv("JWT_SECRET", raising=False)
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_blank_jwt_secret_fails():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, jwt_secret="   ")


def test_defaults(monkeypatch):
    for name in ("S3_ENABLED", "JWT_EXPIRATION_HOURS", "BCRYPT_ROUNDS", "UPLOAD_DIR"):
        monkeypatch.delenv(name, raising=False)
    s = Settings(_env_file=None, jwt_secret="x" * 32)
    assert s.jwt_expiration_hours == 24
    assert s.jwt_algorithm == "HS256"
    assert s.bcrypt_rounds == 12
    assert s.s3_enabled is False
    assert s.s3_bucket_name == "kitchen-hand-guide"
    assert s.aws_region == "ap-southeast-2"
    assert s.upload_dir == "./static/uploads"
    assert s.db_pool_size == 5
    assert s.db_pool_timeout == 3.0


def test_reads_env_vars(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", "from-the-environment-0123456789abcdef")
    monkeypatch.setenv("S3_ENABLED", "true")
    monkeypatch.setenv("JWT_EXPIRATION_HOURS", "8")
    s = Settings(_env_file=None)
    assert s.jwt_secret == "from-the-environment-0123456789abcdef"
    assert s.s3_enabled is True
    assert s.jwt_expiration_hours == 8


@pytest.mark.parametrize("rounds", [3, 32])
def test_bcrypt_rounds_bounds(rounds):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, jwt_secret="x" * 32, bcrypt_rounds=rounds)


def test_secure_cookies_only_in_production():
    assert not Settings(_env_file=None, jwt_secret="x" * 32).secure_cookies
    assert Settings(_env_file=None, jwt_secret="x" * 32, environment="production").secure_cookies
