# -----------------------------------------------------------------------------
# Copyright (c) 2025 MSA Exporter
# Licensed under the MIT License. See LICENSE in project root for details.
# -----------------------------------------------------------------------------

"""
Exporter settings, resolved from (highest first): CLI flags, positional
HOST LOGIN PASSWORD arguments, environment variables, an optional YAML file,
and built-in defaults.
"""

import logging
import os
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

LOG = logging.getLogger(__name__)

DEFAULT_PORT = 8000
DEFAULT_INTERVAL = 60.0
DEFAULT_TIMEOUT = 60.0


class FileConfig(BaseModel):
    hostname: Optional[str] = None
    login: Optional[str] = None
    password: Optional[str] = None
    port: Optional[int] = None
    interval: Optional[float] = None
    timeout: Optional[float] = None
    max_iterations: Optional[int] = None

    class Config:
        extra = 'ignore'


class EnvConfig(BaseSettings):
    # Numbers are kept as strings so a bad value can be ignored instead of failing
    HOST: Optional[str] = None
    LOGIN: Optional[str] = None
    PASSWORD: Optional[str] = None
    PORT: Optional[str] = None
    INTERVAL: Optional[str] = None
    TIMEOUT: Optional[str] = None
    MAX_ITERATIONS: Optional[str] = None

    class Config:
        case_sensitive = False
        extra = 'ignore'


class ExporterSettings(BaseModel):
    hostname: str = Field(min_length=1)
    login: str = Field(min_length=1)
    password: str = Field(min_length=1)
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    interval: float = Field(default=DEFAULT_INTERVAL, gt=0)
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    max_iterations: int = Field(default=0, ge=0)


def load_file_config(config_file: Optional[str]) -> FileConfig:
    """Load the YAML config file, or return an empty config when none is given."""
    if not config_file:
        return FileConfig()
    if not os.path.exists(config_file):
        raise ValueError(f"Config file not found: {config_file}")
    with open(config_file, 'r') as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {config_file} must contain a mapping")
    LOG.debug(f"Loaded configuration from {config_file}")
    return FileConfig(**data)


def _env_number(env: EnvConfig, name: str, kind):
    raw = getattr(env, name)
    if raw is None or raw == "":
        return None
    try:
        return kind(raw)
    except ValueError:
        LOG.warning(f"Invalid {name} environment variable: {raw!r}, ignoring")
        return None


def _first(*values):
    for value in values:
        if value is not None and value != "":
            return value
    return None


def load_settings(args, use_dotenv: bool = True) -> ExporterSettings:
    """
    Merge every configuration source into validated settings.

    Args:
        args: Parsed argparse namespace from main.build_parser()
        use_dotenv: Load a .env file from the working directory first

    Returns:
        ExporterSettings

    Raises:
        ValueError: On an unreadable config file
        pydantic.ValidationError: On missing credentials or out-of-range values
    """
    if use_dotenv:
        # Existing environment variables win over .env entries
        load_dotenv()

    env = EnvConfig()
    file_config = load_file_config(getattr(args, 'config', None))

    positional = list(getattr(args, 'positional', None) or [])
    if positional and len(positional) < 3:
        LOG.warning("Positional arguments need HOST LOGIN PASSWORD, ignoring them")
    if len(positional) >= 3:
        pos_host, pos_login, pos_password = positional[:3]
    else:
        pos_host = pos_login = pos_password = None

    values: Dict[str, Any] = {
        'hostname': _first(args.hostname, pos_host, env.HOST, file_config.hostname),
        'login': _first(args.login, pos_login, env.LOGIN, file_config.login),
        'password': _first(args.password, pos_password, env.PASSWORD, file_config.password),
        'port': _first(args.port, _env_number(env, 'PORT', int), file_config.port),
        'interval': _first(args.interval, _env_number(env, 'INTERVAL', float), file_config.interval),
        'timeout': _first(args.timeout, _env_number(env, 'TIMEOUT', float), file_config.timeout),
        'max_iterations': _first(args.maxIterations, _env_number(env, 'MAX_ITERATIONS', int),
                                 file_config.max_iterations),
    }
    # Unset values fall back to the model defaults
    return ExporterSettings(**{key: value for key, value in values.items() if value is not None})
