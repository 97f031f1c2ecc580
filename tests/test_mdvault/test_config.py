"""Unit tests for mdvault.config."""

import textwrap
from pathlib import Path

import pytest

from mdvault.config import DEFAULT_IGNORE, PrivatePolicy, VaultConfig, default_config_path, load_config
from mdvault.errors import ConfigurationError


def _write_config(directory: Path, content: str) -> Path:
    path = directory / "config.yaml"
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


class TestLoadConfig:
    def test_full_config(self, tmp_path: Path):
        (tmp_path / "vault").mkdir()
        path = _write_config(tmp_path, f"""\
            root_path: {tmp_path / "vault"}
            ignore: [.obsidian, drafts]
            private:
              include: true
              icon: "[x]"
            strict: false
            log_level: DEBUG
        """)
        config = load_config(path)
        assert config.root_path == (tmp_path / "vault").resolve()
        assert config.ignore == (".obsidian", "drafts")
        assert config.private == PrivatePolicy(include=True, icon="[x]")
        assert config.strict is False
        assert config.log_level == "DEBUG"

    def test_defaults(self, tmp_path: Path):
        config = load_config(_write_config(tmp_path, f"root_path: {tmp_path}\n"))
        assert config.ignore == DEFAULT_IGNORE
        assert config.private.include is False
        assert config.private.icon == "🔒"
        assert config.strict is True

    def test_relative_root_resolved_against_config_dir(self, tmp_path: Path):
        (tmp_path / "notes").mkdir()
        config = load_config(_write_config(tmp_path, "root_path: notes\n"))
        assert config.root_path == (tmp_path / "notes").resolve()

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigurationError):
            load_config(tmp_path / "absent.yaml")

    def test_empty_file(self, tmp_path: Path):
        with pytest.raises(ConfigurationError, match="empty"):
            load_config(_write_config(tmp_path, "   \n"))

    @pytest.mark.parametrize(
        "content",
        [
            "- a\n- b\n",
            "ignore: []\n",
            "root_path: /definitely/not/here\n",
            "root_path: .\nignore: templates\n",
            "root_path: .\nprivate:\n  include: maybe\n",
            "root_path: .\nstrict: 1\n",
            "root_path: [unclosed\n",
        ],
    )
    def test_invalid(self, tmp_path: Path, content: str):
        with pytest.raises(ConfigurationError):
            load_config(_write_config(tmp_path, content))

    def test_from_dict_empty_ignore(self, tmp_path: Path):
        config = VaultConfig.from_dict({"root_path": str(tmp_path), "ignore": None})
        assert config.ignore == ()

    def test_env_default_path(self, monkeypatch):
        monkeypatch.setenv("MDVAULT_CONFIG", "/etc/mdvault.yaml")
        assert default_config_path() == Path("/etc/mdvault.yaml")
