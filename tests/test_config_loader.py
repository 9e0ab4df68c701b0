# tests/test_config_loader.py
import logging
import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from config_loader import load_config
from logging_formatter import logging_formatter


def write_config(path: Path, text: str) -> str:
    path.write_text(text)
    return str(path)


def test_load_config_with_defaults(tmp_path: Path):
    cfg_path = write_config(tmp_path / "config.yaml", """
cluster_name: cluster1
config_dir: conf
store:
  host: logsearch.local
""")

    config = load_config(cfg_path)

    assert config.cluster_name == "cluster1"
    assert config.config_dir == os.path.abspath("conf")
    assert config.poll_interval_seconds == 2.0
    assert config.log_level == "INFO"
    assert config.store.type == "logsearch"
    assert config.store.port == 61888


def test_load_config_local_store(tmp_path: Path):
    cfg_path = write_config(tmp_path / "config.yaml", f"""
cluster_name: " cluster1 "
config_dir: {tmp_path}
poll_interval_seconds: 0.5
log_level: debug
store:
  type: local
  local_dir: {tmp_path / "store"}
""")

    config = load_config(cfg_path)

    assert config.cluster_name == "cluster1"
    assert config.log_level == "DEBUG"
    assert config.store.local_dir == str(tmp_path / "store")


def test_load_config_defaults_to_cwd(tmp_path: Path, monkeypatch):
    write_config(tmp_path / "config.yaml", """
cluster_name: c
config_dir: /tmp
store:
  host: h
""")
    monkeypatch.chdir(tmp_path)

    assert load_config().cluster_name == "c"


def test_missing_config_raises(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.yaml"))


def test_non_mapping_config_raises(tmp_path: Path):
    cfg_path = write_config(tmp_path / "config.yaml", "- a\n- b\n")
    with pytest.raises(ValueError):
        load_config(cfg_path)


@pytest.mark.parametrize("text", [
    "cluster_name: ''\nconfig_dir: /tmp\nstore: {host: h}\n",
    "cluster_name: c\nconfig_dir: /tmp\nstore: {type: logsearch}\n",
    "cluster_name: c\nconfig_dir: /tmp\nstore: {type: local}\n",
    "cluster_name: c\nconfig_dir: /tmp\nstore: {host: h, port: 70000}\n",
    "cluster_name: c\nconfig_dir: /tmp\npoll_interval_seconds: 0\nstore: {host: h}\n",
    "cluster_name: c\nconfig_dir: /tmp\nlog_level: LOUD\nstore: {host: h}\n",
])
def test_invalid_config_rejected(tmp_path: Path, text: str):
    cfg_path = write_config(tmp_path / "config.yaml", text)
    with pytest.raises(ValidationError):
        load_config(cfg_path)


def test_logging_formatter_accepts_level_name():
    root = logging.getLogger()
    old_level = root.level
    try:
        logging_formatter("debug")
        assert root.level == logging.DEBUG
        assert logging.getLogger("urllib3").level == logging.WARNING
    finally:
        root.setLevel(old_level)
