"""YAML settings sources with conf.d support.

Each settings model reads ``<dir>/<name>.yaml`` followed by
``<dir>/<name>.d/*.yaml`` (then ``*.yml``), later files overriding earlier
ones. ``<dir>`` defaults to ``conf`` and can be moved with an env variable.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic_settings import YamlConfigSettingsSource

if TYPE_CHECKING:
    from pydantic_settings import BaseSettings


def conf_d_files(name: str, config_dir_env: str, base_dir: str = "conf") -> list[Path]:
    """YAML files for ``name`` in override order.

    Args:
        name: Config name, e.g. ``etcd`` for ``etcd.yaml`` and ``etcd.d/``.
        config_dir_env: Env variable that overrides ``base_dir``.
        base_dir: Default config directory.
    """
    config_dir = Path(os.getenv(config_dir_env, base_dir))
    files = [config_dir / f"{name}.yaml"]
    overrides = config_dir / f"{name}.d"
    if overrides.is_dir():
        files.extend(sorted(overrides.glob("*.yaml")))
        files.extend(sorted(overrides.glob("*.yml")))
    return [f for f in files if f.is_file()]


def _yaml_source(
    settings_cls: type[BaseSettings], name: str, config_dir_env: str
) -> YamlConfigSettingsSource:
    files = conf_d_files(name, config_dir_env)
    return YamlConfigSettingsSource(
        settings_cls,
        yaml_file=files or None,
        yaml_file_encoding="utf-8",
    )


def create_etcd_yaml_source(settings_cls: type[BaseSettings]) -> YamlConfigSettingsSource:
    """conf/etcd.yaml + conf/etcd.d/*.yaml; directory from ETCD_CONFIG_DIR."""
    return _yaml_source(settings_cls, "etcd", "ETCD_CONFIG_DIR")


def create_logging_yaml_source(settings_cls: type[BaseSettings]) -> YamlConfigSettingsSource:
    """conf/logging.yaml + conf/logging.d/*.yaml; directory from LOGGING_CONFIG_DIR."""
    return _yaml_source(settings_cls, "logging", "LOGGING_CONFIG_DIR")
