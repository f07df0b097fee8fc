"""Unit tests for config_template module."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from src.book_service.runtime.config.config_data import ConfigData
from src.book_service.runtime.config.config_template import (
    apply_environment_overrides,
    load_templated_yaml,
    substitute_env_vars,
)

CONFIG_TEMPLATE = """
config:
  app:
    environment: "${APP_ENVIRONMENT:-development}"
    host: "${APP_HOST:-0.0.0.0}"
    port: ${APP_PORT:-9091}
  database:
    host: "${MYSQL_ADDR:-127.0.0.1}"
    port: ${MYSQL_PORT:-3306}
    name: "${MYSQL_DATABASE:-book}"
    user: "${MYSQL_USER:-root}"
    password: "${MYSQL_PASSWORD:-}"
  logging:
    level: "${LOG_LEVEL:-INFO}"
"""


def _write_config(directory: Path, content: str = CONFIG_TEMPLATE) -> Path:
    path = directory / "config.yaml"
    path.write_text(content)
    return path


class TestSubstituteEnvVars:
    """Test cases for substitute_env_vars function."""

    def test_substitute_simple_env_var(self):
        with patch.dict(os.environ, {"TEST_VAR": "test_value"}):
            assert substitute_env_vars("${TEST_VAR}") == "test_value"

    def test_substitute_env_var_in_text(self):
        """Placeholders embedded in surrounding text are replaced in place."""
        with patch.dict(os.environ, {"HOST": "localhost", "PORT": "8080"}):
            result = substitute_env_vars("http://${HOST}:${PORT}/book")
            assert result == "http://localhost:8080/book"

    def test_substitute_env_var_with_default(self):
        with patch.dict(os.environ, {}, clear=True):
            assert substitute_env_vars("${MISSING_VAR:-fallback}") == "fallback"

    def test_substitute_env_var_with_default_when_set(self):
        with patch.dict(os.environ, {"PRESENT_VAR": "actual"}):
            assert substitute_env_vars("${PRESENT_VAR:-fallback}") == "actual"

    def test_substitute_env_var_with_empty_default(self):
        with patch.dict(os.environ, {}, clear=True):
            assert substitute_env_vars("${MISSING_VAR:-}") == ""

    def test_substitute_required_env_var_missing(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(
                ValueError, match="Required environment variable MISSING_VAR not set"
            ):
                substitute_env_vars("${MISSING_VAR}")

    def test_substitute_env_var_with_custom_error(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(
                ValueError,
                match="Required environment variable MYSQL_ADDR: database host",
            ):
                substitute_env_vars("${MYSQL_ADDR:?database host}")

    def test_text_without_placeholders_is_unchanged(self):
        assert substitute_env_vars("plain: value") == "plain: value"


class TestApplyEnvironmentOverrides:
    def test_prefixed_variable_replaces_unprefixed(self):
        with patch.dict(
            os.environ, {"MYSQL_ADDR": "db.local", "TEST_MYSQL_ADDR": "db.test"}, clear=True
        ):
            apply_environment_overrides("test")

            assert os.environ["MYSQL_ADDR"] == "db.test"

    def test_other_environments_are_ignored(self):
        with patch.dict(
            os.environ,
            {"MYSQL_ADDR": "db.local", "PRODUCTION_MYSQL_ADDR": "db.prod"},
            clear=True,
        ):
            apply_environment_overrides("development")

            assert os.environ["MYSQL_ADDR"] == "db.local"


class TestLoadTemplatedYaml:
    """Test cases for load_templated_yaml function."""

    def test_defaults_apply_without_environment(self, tmp_path: Path):
        path = _write_config(tmp_path)

        with patch.dict(os.environ, {}, clear=True):
            config = load_templated_yaml(path)

        assert isinstance(config, ConfigData)
        assert config.app.host == "0.0.0.0"
        assert config.app.port == 9091
        assert config.database.host == "127.0.0.1"
        assert config.database.port == 3306
        assert config.database.name == "book"
        assert config.database.user == "root"
        assert config.database.password == ""

    def test_environment_variables_are_applied(self, tmp_path: Path):
        path = _write_config(tmp_path)
        env = {
            "MYSQL_ADDR": "10.0.0.5",
            "MYSQL_PORT": "3307",
            "MYSQL_DATABASE": "library",
            "MYSQL_USER": "reader",
            "MYSQL_PASSWORD": "s3cret",
            "APP_PORT": "8080",
        }

        with patch.dict(os.environ, env, clear=True):
            config = load_templated_yaml(path)

        assert config.database.host == "10.0.0.5"
        assert config.database.port == 3307
        assert config.database.name == "library"
        assert config.database.user == "reader"
        assert config.database.password == "s3cret"
        assert config.app.port == 8080

    def test_dotenv_file_is_read(self, tmp_path: Path):
        path = _write_config(tmp_path)
        (tmp_path / ".env").write_text("MYSQL_DATABASE=from_dotenv\n")

        with patch.dict(os.environ, {}, clear=True):
            config = load_templated_yaml(path)

        assert config.database.name == "from_dotenv"

    def test_process_environment_wins_over_dotenv(self, tmp_path: Path):
        path = _write_config(tmp_path)
        (tmp_path / ".env").write_text("MYSQL_DATABASE=from_dotenv\n")

        with patch.dict(os.environ, {"MYSQL_DATABASE": "from_env"}, clear=True):
            config = load_templated_yaml(path)

        assert config.database.name == "from_env"

    def test_environment_specific_override(self, tmp_path: Path):
        path = _write_config(tmp_path)
        env = {"APP_ENVIRONMENT": "test", "TEST_MYSQL_ADDR": "test-db"}

        with patch.dict(os.environ, env, clear=True):
            config = load_templated_yaml(path)

        assert config.app.environment == "test"
        assert config.database.host == "test-db"

    def test_missing_config_section_uses_defaults(self, tmp_path: Path):
        path = _write_config(tmp_path, "other: 1\n")

        with patch.dict(os.environ, {}, clear=True):
            config = load_templated_yaml(path)

        assert config == ConfigData()

    def test_non_mapping_yaml_is_rejected(self, tmp_path: Path):
        path = _write_config(tmp_path, "- just\n- a list\n")

        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError, match="Failed to parse YAML"):
                load_templated_yaml(path)

    def test_invalid_yaml_is_rejected(self, tmp_path: Path):
        path = _write_config(tmp_path, "config: [unclosed\n")

        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError, match="Error parsing YAML"):
                load_templated_yaml(path)

    def test_invalid_values_are_rejected(self, tmp_path: Path):
        path = _write_config(tmp_path)

        with patch.dict(os.environ, {"MYSQL_PORT": "not-a-port"}, clear=True):
            with pytest.raises(ValueError, match="Invalid configuration"):
                load_templated_yaml(path)

    def test_missing_file_raises(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_templated_yaml(tmp_path / "absent.yaml")

    def test_repository_config_loads(self):
        """The shipped config.yaml parses with an empty environment."""
        repo_config = Path(__file__).resolve().parents[3] / "config.yaml"

        with patch.dict(os.environ, {}, clear=True):
            config = load_templated_yaml(repo_config)

        assert config.app.port == 9091
        assert config.database.driver == "mysql+pymysql"
