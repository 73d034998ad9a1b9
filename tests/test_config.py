"""Unit tests for configuration loading."""
import pytest

from src.core.config_manager import ConfigManager, parse_admin_ids


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "bot_config.toml"
    path.write_text(
        "[admin]\n"
        "admin_ids = [1, 2]\n"
        "\n"
        "[summarizer]\n"
        'model_name = "gpt-4o-mini"\n'
        "\n"
        "[pipeline]\n"
        "summary_timeout_ms = 30000\n",
        encoding="utf-8",
    )
    return path


class TestParseAdminIds:
    def test_comma_separated(self):
        assert parse_admin_ids("123, 456,") == [123, 456]

    @pytest.mark.parametrize("raw", [None, ""])
    def test_empty(self, raw):
        assert parse_admin_ids(raw) == []

    def test_invalid_entry(self):
        with pytest.raises(ValueError):
            parse_admin_ids("123,abc")


class TestLoad:
    def test_defaults_when_file_missing(self, tmp_path):
        config = ConfigManager.load(tmp_path / "missing.toml", environ={})

        assert config.pipeline.summary_timeout_ms == 60000
        assert config.pipeline.status_text == "Summarising"
        assert config.summarizer.model_name == "gpt-3.5-turbo"
        assert config.summarizer.prompt_suffix == " Tl;dr"
        assert config.admin.admin_ids == []

    def test_reads_toml(self, config_file):
        config = ConfigManager.load(config_file, environ={})

        assert config.admin.admin_ids == [1, 2]
        assert config.summarizer.model_name == "gpt-4o-mini"
        assert config.pipeline.summary_timeout_ms == 30000

    def test_environment_overrides(self, config_file):
        environ = {
            "BOT_TOKEN": "123:abc",
            "API_KEY": "sk-test",
            "BOT_ADMIN": "10,20",
            "GENIUS_ACCESS_TOKEN": "genius",
        }

        config = ConfigManager.load(config_file, environ=environ)

        assert config.telegram.token == "123:abc"
        assert config.summarizer.api_key == "sk-test"
        assert config.admin.admin_ids == [10, 20]
        assert config.lyrics.access_token == "genius"

    def test_invalid_value_raises(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text('[pipeline]\nsummary_timeout_ms = "soon"\n', encoding="utf-8")

        with pytest.raises(ValueError):
            ConfigManager.load(path, environ={})

    def test_cached_and_reloadable(self, config_file):
        loaded = ConfigManager.load(config_file, environ={})

        assert ConfigManager.get_full_config() is loaded
        assert ConfigManager.reload().admin.admin_ids == [1, 2]


class TestAdminInbox:
    def test_defaults_to_first_admin(self, tmp_path):
        config = ConfigManager.load(tmp_path / "missing.toml", environ={"BOT_ADMIN": "5,6"})

        assert config.admin.inbox() == 5

    def test_none_without_admins(self, tmp_path):
        config = ConfigManager.load(tmp_path / "missing.toml", environ={})

        assert config.admin.inbox() is None
