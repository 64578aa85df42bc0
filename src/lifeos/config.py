"""Configuration loading from environment variables and lifeos.toml."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

_HOME_DIR = Path.home() / ".lifeos"
_DEFAULT_STORAGE_DIR = _HOME_DIR / "storage"
_DEFAULT_EXPORT_DIR = _HOME_DIR / "archive"
_CONFIG_FILENAME = "lifeos.toml"


@dataclass
class EngineConfig:
    """Configuration for the model engine."""

    name: str = "anthropic_api"
    retrieval_model: str = "claude-sonnet-4-5-20250929"
    capture_model: str = "claude-haiku-4-5-20251001"
    retrieval_temperature: float = 0.2
    max_tokens: int = 4096
    timeout: int = 120
    api_key: str | None = None


@dataclass
class LifeOSConfig:
    """Top-level LIFE OS configuration."""

    engine: EngineConfig = field(default_factory=EngineConfig)
    storage_dir: Path = _DEFAULT_STORAGE_DIR
    export_dir: Path = _DEFAULT_EXPORT_DIR
    context_window: int = 50
    history_depth: int = 10
    log_level: str = "WARNING"


def load_config(config_path: Path | None = None) -> LifeOSConfig:
    """Load configuration from environment variables and optional lifeos.toml.

    Priority: environment variables > lifeos.toml > defaults.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = tomllib.loads(config_path.read_text())
    else:
        # Search current dir and ~/.lifeos/
        for candidate in [Path.cwd() / _CONFIG_FILENAME, _HOME_DIR / _CONFIG_FILENAME]:
            if candidate.exists():
                file_data = tomllib.loads(candidate.read_text())
                break

    engine_data = file_data.get("engine", {})
    defaults = EngineConfig()

    config = LifeOSConfig(
        engine=EngineConfig(
            name=os.getenv("LIFEOS_ENGINE", engine_data.get("name", defaults.name)),
            retrieval_model=os.getenv(
                "LIFEOS_RETRIEVAL_MODEL",
                engine_data.get("retrieval_model", defaults.retrieval_model),
            ),
            capture_model=os.getenv(
                "LIFEOS_CAPTURE_MODEL",
                engine_data.get("capture_model", defaults.capture_model),
            ),
            retrieval_temperature=float(
                engine_data.get("retrieval_temperature", defaults.retrieval_temperature)
            ),
            max_tokens=int(engine_data.get("max_tokens", defaults.max_tokens)),
            timeout=int(os.getenv("LIFEOS_TIMEOUT", engine_data.get("timeout", defaults.timeout))),
            api_key=os.getenv("ANTHROPIC_API_KEY") or None,
        ),
        storage_dir=Path(
            os.getenv("LIFEOS_STORAGE_DIR", file_data.get("storage_dir", str(_DEFAULT_STORAGE_DIR)))
        ).expanduser(),
        export_dir=Path(
            os.getenv("LIFEOS_EXPORT_DIR", file_data.get("export_dir", str(_DEFAULT_EXPORT_DIR)))
        ).expanduser(),
        context_window=int(file_data.get("context_window", 50)),
        history_depth=int(file_data.get("history_depth", 10)),
        log_level=os.getenv("LIFEOS_LOG_LEVEL", file_data.get("log_level", "WARNING")),
    )
    return config
