"""Configuration for crmflow.

Settings come from a YAML file (``CRMFLOW_CONFIG`` or ``config.yaml``);
``CRMFLOW_DATABASE_URL`` or ``DATABASE_URL`` override the database URL.
"""

from __future__ import annotations

import os
from typing import Optional

import yaml
from pydantic import BaseModel

from .constants import DEFAULT_DATE_RANGE


class AnalyticsConfig(BaseModel):
    """Settings for execution analytics."""

    default_date_range: str = DEFAULT_DATE_RANGE


class CRMFlowConfig(BaseModel):
    """Top-level configuration model."""

    database_url: Optional[str] = None
    analytics: AnalyticsConfig = AnalyticsConfig()


def load_config(path: Optional[str] = None) -> CRMFlowConfig:
    """Load configuration from YAML file.

    Args:
        path: Optional path to config file. Falls back to CRMFLOW_CONFIG env
            variable or 'config.yaml' in the current directory.
    """

    config_path = path or os.getenv("CRMFLOW_CONFIG", "config.yaml")
    if os.path.exists(config_path):
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        config = CRMFlowConfig(**data)
    else:
        config = CRMFlowConfig()

    env_db_url = os.getenv("CRMFLOW_DATABASE_URL") or os.getenv("DATABASE_URL")
    if env_db_url:
        config.database_url = env_db_url
    return config
