"""YAML config loader — reads pilot-config.yml into PilotConfig."""

from pathlib import Path

import yaml

from promptpilot.schemas.config import PilotConfig


def load_config(path: str | Path) -> PilotConfig:
    """Load and validate a config file.

    Raises ``FileNotFoundError`` if the path doesn't exist and
    ``pydantic.ValidationError`` if the YAML content is invalid.  A relative
    ``corpus_dir`` is resolved against the config file's directory.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    raw = yaml.safe_load(path.read_text())
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValueError(f"Config file must be a YAML mapping, got {type(raw).__name__}")

    # YAML loads lists with only commented-out items as None.
    for key in ("corpus_extensions", "models"):
        if key in raw and raw[key] is None:
            del raw[key]

    if raw.get("corpus_dir") and not Path(raw["corpus_dir"]).is_absolute():
        raw["corpus_dir"] = str(path.parent / raw["corpus_dir"])

    return PilotConfig(**raw)
