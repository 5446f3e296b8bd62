"""
Configuration and logging setup for TaskFlow.

Precedence (lowest to highest): defaults, taskflow.yaml, environment.
A .env file in the working directory is loaded into the environment at
import time.
"""

import logging
import os
import yaml
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Paths
CONFIG_FILE = Path("taskflow.yaml")
DATA_DIR = Path("data")

ENV_PREFIX = "TASKFLOW_"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


@dataclass
class Settings:
    """Runtime settings. Field names double as YAML keys."""
    backend: str = "memory"          # 'memory' | 'json'
    data_dir: Path = DATA_DIR
    backend_latency: float = 0.0     # Simulated round-trip for the memory backend
    log_level: str = "INFO"
    default_login: str = "user"

    # Background job simulator
    job_step: int = 20
    job_interval: float = 0.5
    job_retention: float = 5.0


def _coerce(value, current):
    """Convert a raw YAML/env value to the type of the default."""
    if isinstance(current, bool):
        return str(value).lower() in ("1", "true", "yes", "on")
    if isinstance(current, Path):
        return Path(value)
    if isinstance(current, int):
        return int(value)
    if isinstance(current, float):
        return float(value)
    return str(value)


def load_yaml_config(path: Optional[Path] = None) -> dict:
    """Load overrides from YAML. Missing file means no overrides."""
    path = path or CONFIG_FILE
    if not path.exists():
        return {}
    with open(path) as f:
        data = yaml.safe_load(f)
    return data or {}


def load_settings(path: Optional[Path] = None) -> Settings:
    """Build Settings from defaults, the YAML file and TASKFLOW_* env vars."""
    settings = Settings()
    overrides = load_yaml_config(path)

    for f in fields(Settings):
        current = getattr(settings, f.name)
        if f.name in overrides and overrides[f.name] is not None:
            setattr(settings, f.name, _coerce(overrides[f.name], current))
        env_value = os.environ.get(ENV_PREFIX + f.name.upper())
        if env_value:
            setattr(settings, f.name, _coerce(env_value, current))

    return settings


def configure_logging(level: str = "INFO", handler: Optional[logging.Handler] = None) -> None:
    """Configure root logging once for the process."""
    root = logging.getLogger()
    if handler is None:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.handlers[:] = [handler]
    root.setLevel(level.upper())
