from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel


class Limits(BaseModel):
    max_file_size_bytes: int = 200_000_000

    # Debug directory bounds
    max_sections: int = 96
    max_debug_entries: int = 32
    max_codeview_path_len: int = 512


class AppConfig(BaseModel):
    schema_version: str = "1.0"
    log_level: str = "WARNING"
    limits: Limits = Limits()


def load_config(path: Optional[str]) -> AppConfig:
    if not path:
        return AppConfig()
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    return AppConfig.model_validate(data)


def config_to_snapshot(cfg: AppConfig) -> Dict[str, Any]:
    return cfg.model_dump()
