"""
Tests for tasks.settings: YAML + environment configuration loading.
"""

import os
from unittest.mock import patch

import pytest

from core.errors import ConfigurationError
from tasks.settings import env_overrides, load_config, read_config_file


class TestReadConfigFile:
    def test_reads_mapping(self, tmp_path):
        path = tmp_path / "pgai.yml"
        path.write_text("default_provider: openai\ndefault_dimensions: 1536\n")
        assert read_config_file(path) == {"default_provider": "openai", "default_dimensions": 1536}

    def test_empty_file(self, tmp_path):
        path = tmp_path / "pgai.yml"
        path.write_text("")
        assert read_config_file(path) == {}

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / "pgai.yml"
        path.write_text("- openai\n- cohere\n")
        with pytest.raises(ConfigurationError, match="must contain a mapping"):
            read_config_file(path)


class TestEnvOverrides:
    def test_maps_variables(self):
        values = env_overrides(
            {
                "OLLAMA_BASE_URL": "http://ollama:11434",
                "PGAI_DEFAULT_PROVIDER": "openai",
                "PGAI_DEFAULT_MODEL": "text-embedding-3-small",
                "PGAI_DEFAULT_DIMENSIONS": "1536",
                "UNRELATED": "x",
            }
        )
        assert values == {
            "ollama_base_url": "http://ollama:11434",
            "default_provider": "openai",
            "default_model": "text-embedding-3-small",
            "default_dimensions": 1536,
        }

    def test_empty_values_ignored(self):
        assert env_overrides({"PGAI_DEFAULT_MODEL": ""}) == {}

    def test_bad_dimensions(self):
        with pytest.raises(ConfigurationError, match="PGAI_DEFAULT_DIMENSIONS must be an integer"):
            env_overrides({"PGAI_DEFAULT_DIMENSIONS": "lots"})


class TestLoadConfig:
    def test_defaults_without_file(self, clean_env):
        config = load_config(environ={}, dotenv=False)
        assert config.default_provider == "ollama"
        assert config.default_dimensions == 768

    def test_reads_default_file_in_cwd(self, clean_env):
        (clean_env / "pgai.yml").write_text("default_provider: cohere\ndefault_model: embed-english-v3.0\n")
        config = load_config(environ={}, dotenv=False)
        assert config.default_provider == "cohere"
        assert config.default_model == "embed-english-v3.0"

    def test_explicit_path(self, clean_env):
        path = clean_env / "custom.yml"
        path.write_text("ollama_base_url: http://gpu-box:11434\n")
        assert load_config(path, environ={}, dotenv=False).ollama_base_url == "http://gpu-box:11434"

    def test_pgai_config_variable(self, clean_env):
        path = clean_env / "from_env.yml"
        path.write_text("default_dimensions: 1024\n")
        config = load_config(environ={"PGAI_CONFIG": str(path)}, dotenv=False)
        assert config.default_dimensions == 1024

    def test_environment_beats_file(self, clean_env):
        (clean_env / "pgai.yml").write_text("default_provider: cohere\n")
        config = load_config(environ={"PGAI_DEFAULT_PROVIDER": "openai"}, dotenv=False)
        assert config.default_provider == "openai"

    def test_missing_explicit_file(self, clean_env):
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            load_config(clean_env / "nope.yml", environ={}, dotenv=False)

    def test_invalid_values_become_configuration_errors(self, clean_env):
        (clean_env / "pgai.yml").write_text("default_provider: bogus\n")
        with pytest.raises(ConfigurationError, match="Unknown default_provider"):
            load_config(environ={}, dotenv=False)

    def test_dotenv_file_loaded(self, clean_env):
        (clean_env / ".env").write_text("PGAI_DEFAULT_MODEL=mxbai-embed-large\n")
        with patch.dict(os.environ):
            os.environ.pop("PGAI_DEFAULT_MODEL", None)
            config = load_config()
        assert config.default_model == "mxbai-embed-large"

    def test_dotenv_can_be_disabled(self, clean_env):
        with patch("tasks.settings.load_dotenv") as mock_load:
            load_config(environ={}, dotenv=False)
        mock_load.assert_not_called()

    @pytest.mark.parametrize(
        "body, message",
        [
            ("provider_configs: []\n", "provider_configs must be a mapping, got list"),
            ("provider_configs: 3\n", "provider_configs must be a mapping, got int"),
            ("provider_configs:\n  openai: [1]\n", "must be a mapping, got list"),
        ],
    )
    def test_malformed_provider_configs(self, clean_env, body, message):
        (clean_env / "pgai.yml").write_text(body)
        with pytest.raises(ConfigurationError, match=message):
            load_config(environ={}, dotenv=False)

    def test_empty_ollama_base_url_means_unset(self, clean_env):
        (clean_env / "pgai.yml").write_text('ollama_base_url: ""\n')
        assert load_config(environ={}, dotenv=False).ollama_base_url is None
