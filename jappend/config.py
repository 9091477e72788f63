from __future__ import annotations

from pathlib import Path
from typing import Any, ClassVar

import yaml
from pydantic import BaseModel, Field

from jappend.contracts import WriterOptions


class WriterCfg(BaseModel):
    model_config: ClassVar[dict[str, Any]] = {"extra": "forbid"}

    pretty: bool = True
    indent: int = 2
    init_array: bool = True
    buffer_flush_threshold: int | None = 1
    suppress_threshold_flush_errors: bool = False

    def to_options(self, **extra: Any) -> WriterOptions:
        """Build validated :class:`WriterOptions`; ``extra`` supplies non-file fields."""
        return WriterOptions(**self.model_dump(), **extra)


class LoggingCfg(BaseModel):
    model_config: ClassVar[dict[str, Any]] = {"extra": "forbid"}

    level: str = "INFO"
    json_format: bool = False
    log_dir: Path | None = None


class Config(BaseModel):
    model_config: ClassVar[dict[str, Any]] = {"extra": "forbid"}

    writer: WriterCfg = Field(default_factory=WriterCfg)
    logging: LoggingCfg = Field(default_factory=LoggingCfg)


def _read_yaml(path: Path) -> dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    data = yaml.safe_load(text)
    return data or {}


def load_config(path: str | Path | None = None) -> Config:
    """Load settings from a YAML file; defaults when ``path`` is None."""

    if path is None:
        return Config()

    config_path = Path(path)
    if not config_path.exists():
        msg = f"Missing config file: {config_path}"
        raise FileNotFoundError(msg)

    return Config.model_validate(_read_yaml(config_path))
