"""Tests for config loading and validation."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from promptpilot.config import load_config
from promptpilot.schemas.config import PilotConfig
from promptpilot.schemas.matching import ModelConfig


class TestPilotConfig:
    """Test the PilotConfig Pydantic model directly."""

    def test_defaults(self) -> None:
        cfg = PilotConfig()
        assert cfg.corpus_dir == "docs/reference-prompts"
        assert cfg.corpus_extensions == [".md"]
        assert cfg.use_default_policy is True
        assert cfg.relevance_top_n == 5
        assert cfg.inspiration_count == 3
        assert cfg.models == []

    def test_top_n_must_be_positive(self) -> None:
        with pytest.raises(ValidationError, match="positive"):
            PilotConfig(relevance_top_n=0)

    def test_extension_needs_dot(self) -> None:
        with pytest.raises(ValidationError, match="must start with"):
            PilotConfig(corpus_extensions=["md"])

    def test_extensions_lowercased(self) -> None:
        cfg = PilotConfig(corpus_extensions=[".MD", ".txt"])
        assert cfg.corpus_extensions == [".md", ".txt"]

    def test_extra_models(self) -> None:
        cfg = PilotConfig(models=[{"id": "claude-x", "name": "Claude X", "provider": "anthropic"}])
        assert cfg.models == [ModelConfig(id="claude-x", name="Claude X", provider="anthropic")]


class TestLoadConfig:
    """Test YAML file loading."""

    def test_load_valid_file(self, tmp_path: Path) -> None:
        cfg_file = tmp_path / "pilot-config.yml"
        cfg_file.write_text(
            """\
corpus_dir: "prompts"
use_default_policy: false
relevance_top_n: 3
"""
        )
        cfg = load_config(cfg_file)
        assert cfg.use_default_policy is False
        assert cfg.relevance_top_n == 3
        # Relative corpus_dir resolves next to the config file
        assert cfg.corpus_dir == str(tmp_path / "prompts")

    def test_absolute_corpus_dir_kept(self, tmp_path: Path) -> None:
        cfg_file = tmp_path / "pilot-config.yml"
        cfg_file.write_text(f'corpus_dir: "{tmp_path / "abs"}"\n')
        assert load_config(cfg_file).corpus_dir == str(tmp_path / "abs")

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        cfg_file = tmp_path / "pilot-config.yml"
        cfg_file.write_text("# nothing here\n")
        assert load_config(cfg_file) == PilotConfig()

    def test_file_not_found(self) -> None:
        with pytest.raises(FileNotFoundError):
            load_config("/nonexistent/pilot-config.yml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        bad = tmp_path / "bad.yml"
        bad.write_text("just a string")
        with pytest.raises(ValueError, match="YAML mapping"):
            load_config(bad)

    def test_null_lists_use_defaults(self, tmp_path: Path) -> None:
        """YAML keys with only commented-out items load as None."""
        cfg_file = tmp_path / "pilot-config.yml"
        cfg_file.write_text(
            """\
corpus_extensions:
  # - ".txt"
models:
"""
        )
        cfg = load_config(cfg_file)
        assert cfg.corpus_extensions == [".md"]
        assert cfg.models == []

    def test_example_config_loads(self) -> None:
        """The example config in the repo is valid and resolves its corpus dir."""
        example = Path(__file__).resolve().parents[1] / "config" / "pilot-config.yml"
        cfg = load_config(example)
        assert cfg.models == []
        assert Path(cfg.corpus_dir) == example.parent / "../docs/reference-prompts"
