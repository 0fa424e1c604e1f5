"""
Unit tests for client configuration

Construction options, defaults and environment loading.
"""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from NameAPI.clients import ClientConfig, ConfigurationError, RequestPolicy, load_options_from_env
from NameAPI.clients.config import DEFAULT_IDENTIFIER, DEFAULT_URL


class TestClientConfig:
    """Test building configuration from flat options"""

    def test_defaults(self):
        config = ClientConfig.from_options(user="u", token="t")

        assert config.credentials.user == "u"
        assert config.credentials.token.get_secret_value() == "t"
        assert config.identifier == DEFAULT_IDENTIFIER
        assert config.version == 1
        assert config.url == DEFAULT_URL
        assert config.policy == RequestPolicy(debug=False, fatal=False, retries=0, timeout=10)

    def test_alias_options(self):
        config = ClientConfig.from_options(apiuser="u", apitoken="t")

        assert config.credentials.user == "u"
        assert config.credentials.token.get_secret_value() == "t"

    def test_all_options(self):
        config = ClientConfig.from_options(
            user="u", token="t", identifier="my-app", version=2, debug=True,
            fatal=True, retries=3, timeout=5, retry_backoff=0.25,
            url="http://localhost:8080/",
        )

        assert config.identifier == "my-app"
        assert config.version == 2
        assert config.url == "http://localhost:8080"
        assert config.policy.debug is True
        assert config.policy.fatal is True
        assert config.policy.retries == 3
        assert config.policy.timeout == 5
        assert config.policy.retry_backoff == 0.25

    def test_string_values_are_coerced(self):
        config = ClientConfig.from_options(user="u", token="t", retries="2", fatal="true", timeout="7")

        assert config.policy.retries == 2
        assert config.policy.fatal is True
        assert config.policy.timeout == 7

    @pytest.mark.parametrize("options,field", [
        ({"token": "t"}, "user"),
        ({"user": "u"}, "token"),
        ({"user": "", "token": "t"}, "user"),
        ({"user": "u", "token": ""}, "token"),
    ])
    def test_missing_credentials(self, options, field):
        with pytest.raises(ConfigurationError) as exc_info:
            ClientConfig.from_options(**options)

        assert any(field in key for key in exc_info.value.field_errors)
        assert exc_info.value.error_code == "CONFIGURATION_ERROR"

    @pytest.mark.parametrize("options,alias,name", [
        ({"user": "u", "apiuser": "u2", "token": "t"}, "apiuser", "user"),
        ({"user": "u", "token": "t", "apitoken": "t2"}, "apitoken", "token"),
    ])
    def test_both_credential_spellings(self, options, alias, name):
        with pytest.raises(ConfigurationError) as exc_info:
            ClientConfig.from_options(**options)

        assert f"{alias} and {name} both given" in exc_info.value.message
        assert list(exc_info.value.field_errors) == [alias]
        assert name in exc_info.value.field_errors[alias]

    @pytest.mark.parametrize("options", [
        {"retries": -1},
        {"timeout": 0},
        {"timeout": "soon"},
        {"retry_backoff": -1.0},
        {"version": 0},
        {"url": "ftp://www.name.com"},
        {"identifier": ""},
        {"colour": "blue"},
    ])
    def test_invalid_options(self, options):
        with pytest.raises(ConfigurationError):
            ClientConfig.from_options(user="u", token="t", **options)

    def test_config_is_frozen(self):
        config = ClientConfig.from_options(user="u", token="t")

        with pytest.raises(ValidationError):
            config.policy.retries = 5

    def test_token_is_hidden(self):
        config = ClientConfig.from_options(user="u", token="super-secret")
        assert "super-secret" not in repr(config)
        assert "super-secret" not in str(config.model_dump())


class TestRequestPolicy:
    """Test retry delays"""

    def test_immediate_retry_by_default(self):
        policy = RequestPolicy(retries=3)
        assert [policy.backoff_delay(n) for n in range(3)] == [0.0, 0.0, 0.0]

    def test_exponential_backoff(self):
        policy = RequestPolicy(retries=3, retry_backoff=1.0)
        assert [policy.backoff_delay(n) for n in range(3)] == [1.0, 2.0, 4.0]


class TestEnvironment:
    """Test reading options from the environment"""

    def test_reads_prefixed_variables(self, clean_env, tmp_path):
        clean_env.setenv("NAME_API_USER", "env-user")
        clean_env.setenv("NAME_API_TOKEN", "env-token")
        clean_env.setenv("NAME_API_TIMEOUT", "20")

        options = load_options_from_env(dotenv_path=str(tmp_path / ".env"))

        assert options == {"user": "env-user", "token": "env-token", "timeout": "20"}

    def test_empty_environment(self, clean_env, tmp_path):
        assert load_options_from_env(dotenv_path=str(tmp_path / ".env")) == {}

    def test_custom_prefix(self, clean_env, tmp_path):
        clean_env.setenv("RESELLER_USER", "other")

        options = load_options_from_env(prefix="RESELLER", dotenv_path=str(tmp_path / ".env"))

        assert options == {"user": "other"}

    def test_dotenv_file(self, clean_env, tmp_path):
        (tmp_path / ".env").write_text("NAME_API_USER=dotenv-user\nNAME_API_TOKEN=dotenv-token\n")
        clean_env.setenv("NAME_API_TOKEN", "real-token")

        with patch.dict(os.environ):
            options = load_options_from_env()

        # Variables already set win over the file
        assert options["user"] == "dotenv-user"
        assert options["token"] == "real-token"
