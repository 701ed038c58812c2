"""Tests for settings and token resolution."""

import os

import pytest

from pbx3_client.auth import CredentialResolver
from pbx3_client.auth.exceptions import CredentialFileError, CredentialNotFoundError


class TestCredentialResolverInit:
    def test_init_default(self):
        resolver = CredentialResolver()
        assert resolver._dotenv_loaded

    def test_init_skip_dotenv(self):
        resolver = CredentialResolver(load_dotenv=False)
        assert not resolver._dotenv_loaded

    def test_dotenv_values_reach_environment(self, tmp_path, monkeypatch):
        dotenv_file = tmp_path / ".env"
        dotenv_file.write_text("TEST_PBX_HOST=https://pbx.test/api\n")
        monkeypatch.delenv("TEST_PBX_HOST", raising=False)

        resolver = CredentialResolver(dotenv_path=str(dotenv_file))
        try:
            assert resolver.resolve(env_var_name="TEST_PBX_HOST", secret=False) == "https://pbx.test/api"
        finally:
            os.environ.pop("TEST_PBX_HOST", None)


class TestCredentialResolverResolve:
    def test_explicit_value_wins(self, monkeypatch):
        monkeypatch.setenv("TEST_TOKEN", "env-value")
        resolver = CredentialResolver(load_dotenv=False)

        assert resolver.resolve(value="explicit", env_var_name="TEST_TOKEN", default="d") == "explicit"

    def test_environment_variable(self, monkeypatch):
        monkeypatch.setenv("TEST_TOKEN", "env-value")
        resolver = CredentialResolver(load_dotenv=False)

        assert resolver.resolve(env_var_name="TEST_TOKEN", default="d") == "env-value"

    def test_default_value(self):
        resolver = CredentialResolver(load_dotenv=False)

        assert resolver.resolve(env_var_name="TEST_MISSING", default="fallback") == "fallback"

    def test_missing_returns_none(self):
        resolver = CredentialResolver(load_dotenv=False)

        assert resolver.resolve(env_var_name="TEST_MISSING") is None

    def test_required_missing_raises(self):
        resolver = CredentialResolver(load_dotenv=False)

        with pytest.raises(CredentialNotFoundError) as exc_info:
            resolver.resolve(env_var_name="TEST_MISSING", required=True)

        assert exc_info.value.env_var_name == "TEST_MISSING"
        assert "TEST_MISSING" in str(exc_info.value)

    def test_token_not_logged(self, monkeypatch, caplog):
        monkeypatch.setenv("TEST_TOKEN", "super-secret")
        resolver = CredentialResolver(load_dotenv=False)

        with caplog.at_level("DEBUG", logger="pbx3_client.auth.credentials"):
            resolver.resolve(env_var_name="TEST_TOKEN")

        assert "super-secret" not in caplog.text
        assert "***" in caplog.text


class TestCredentialResolverFromFile:
    def test_reads_and_strips(self, tmp_path):
        token_file = tmp_path / "token"
        token_file.write_text("  abc123\n")
        resolver = CredentialResolver(load_dotenv=False)

        assert resolver.resolve_from_file(file_path=token_file) == "abc123"

    def test_path_from_env_var(self, tmp_path, monkeypatch):
        token_file = tmp_path / "token"
        token_file.write_text("abc123")
        monkeypatch.setenv("TEST_TOKEN_FILE", str(token_file))
        resolver = CredentialResolver(load_dotenv=False)

        assert resolver.resolve_from_file(env_var_name="TEST_TOKEN_FILE") == "abc123"

    def test_missing_file_returns_none(self, tmp_path):
        resolver = CredentialResolver(load_dotenv=False)

        assert resolver.resolve_from_file(file_path=tmp_path / "absent") is None

    def test_missing_file_required_raises(self, tmp_path):
        resolver = CredentialResolver(load_dotenv=False)

        with pytest.raises(CredentialFileError):
            resolver.resolve_from_file(file_path=tmp_path / "absent", required=True)

    def test_no_path_required_raises(self):
        resolver = CredentialResolver(load_dotenv=False)

        with pytest.raises(CredentialFileError) as exc_info:
            resolver.resolve_from_file(env_var_name="TEST_TOKEN_FILE", required=True)

        assert "TEST_TOKEN_FILE" in str(exc_info.value)

    def test_no_path_returns_none(self):
        resolver = CredentialResolver(load_dotenv=False)

        assert resolver.resolve_from_file() is None


class TestResolveSession:
    def test_explicit_values(self):
        resolver = CredentialResolver(load_dotenv=False)

        assert resolver.resolve_session(base_url="https://pbx.test/api", token="t") == ("https://pbx.test/api", "t")

    def test_nothing_configured(self):
        resolver = CredentialResolver(load_dotenv=False)

        assert resolver.resolve_session() == ("", None)

    def test_token_env_beats_token_file(self, tmp_path, monkeypatch):
        token_file = tmp_path / "token"
        token_file.write_text("from-file")
        monkeypatch.setenv("PBX3_TOKEN", "from-env")
        monkeypatch.setenv("PBX3_TOKEN_FILE", str(token_file))
        resolver = CredentialResolver(load_dotenv=False)

        assert resolver.resolve_session()[1] == "from-env"
