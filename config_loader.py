import os
import logging
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

logger = logging.getLogger("config")

class StoreConfig(BaseModel):
    type: Literal["logsearch", "local"] = "logsearch"
    host: Optional[str] = None
    port: int = Field(default=61888, ge=1, le=65535)
    protocol: Literal["http", "https"] = "http"
    username: Optional[str] = None
    password: Optional[str] = None
    timeout_seconds: float = Field(default=10.0, gt=0)
    local_dir: Optional[str] = None

    @model_validator(mode="after")
    def validate_store_target(self):
        if self.type == "logsearch" and not self.host:
            raise ValueError("store.host is required for the logsearch store")
        if self.type == "local" and not self.local_dir:
            raise ValueError("store.local_dir is required for the local store")
        return self

class AppConfig(BaseModel):
    cluster_name: str
    config_dir: str
    poll_interval_seconds: float = Field(default=2.0, gt=0, le=60)
    log_level: str = "INFO"
    store: StoreConfig

    @field_validator("cluster_name")
    def validate_cluster_name(cls, name: str):
        if not name or not name.strip():
            raise ValueError("cluster_name is empty")
        return name.strip()

    # the directory may appear later; the watcher copes with it missing
    @field_validator("config_dir")
    def validate_config_dir(cls, path: str):
        if not path:
            raise ValueError("config_dir is empty")
        return os.path.abspath(path)

    @field_validator("log_level")
    def validate_log_level(cls, level: str):
        level = level.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {level}")
        return level

def load_config(path: str = None) -> AppConfig:
    if path is None:
        path = os.path.join(os.getcwd(), "config.yaml")

    if not os.path.exists(path):
        raise FileNotFoundError(f"config not found: {path}")

    with open(path, "r") as fp:
        raw = yaml.safe_load(fp)

    if not isinstance(raw, dict):
        raise ValueError(f"config must be a mapping: {path}")

    config = AppConfig.model_validate(raw)
    logger.debug("action=config_loaded path=%s cluster=%s", path, config.cluster_name)
    return config
