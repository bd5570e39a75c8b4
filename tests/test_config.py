"""Tests for configuration loading."""

from campus_wrapped.config import Config, load_config


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path, monkeypatch):
        monkeypatch.delenv("CAMPUS_WRAPPED_BASE_URL", raising=False)
        monkeypatch.delenv("CAMPUS_WRAPPED_BASE_PATH", raising=False)
        config = load_config(tmp_path / "nope.yaml")
        assert config == Config()

    def test_yaml_overrides(self, tmp_path, monkeypatch):
        monkeypatch.delenv("CAMPUS_WRAPPED_BASE_URL", raising=False)
        path = tmp_path / "config.yaml"
        path.write_text(
            "data:\n"
            "  base_url: https://example.org/wrapped/\n"
            "shortener:\n"
            "  delay_seconds: 0.5\n"
        )
        config = load_config(path)
        assert config.data.base_url == "https://example.org/wrapped/"
        assert config.shortener.delay_seconds == 0.5
        assert config.story.tap_debounce_ms == 300

    def test_env_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv("CAMPUS_WRAPPED_BASE_URL", "https://env.test/")
        monkeypatch.setenv("CAMPUS_WRAPPED_BASE_PATH", "/")
        config = load_config(tmp_path / "nope.yaml")
        assert config.data.base_url == "https://env.test/"
        assert config.data.base_path == "/"

    def test_empty_yaml(self, tmp_path, monkeypatch):
        monkeypatch.delenv("CAMPUS_WRAPPED_BASE_URL", raising=False)
        monkeypatch.delenv("CAMPUS_WRAPPED_BASE_PATH", raising=False)
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_config(path) == Config()


class TestDataConfig:
    def test_url_for(self):
        config = Config()
        config.data.base_url = "https://host/base/"
        assert config.data.url_for("data/pois.json") == "https://host/base/data/pois.json"
        assert config.data.url_for("/data/pois.json") == "https://host/base/data/pois.json"

    def test_public_dir_relative_to_project(self, tmp_path):
        config = Config()
        assert config.resolved_public_dir.name == "public"
        config.data.public_dir = str(tmp_path)
        assert config.public_file("data/x.json") == tmp_path / "data" / "x.json"
