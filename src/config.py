"""Configuration module — frozen dataclass loaded from env vars and optional YAML."""

import logging
import math
import os
from dataclasses import dataclass, field
from typing import Mapping

import yaml

from src.errors import ConfigError
from src.retry import RetryPolicy

logger = logging.getLogger(__name__)

ENV_AWS_REGION = "AWS_REGION"
ENV_S3_BUCKET = "S3_BUCKET_NAME"
ENV_CW_LOG_GROUP = "CW_LOG_GROUP_NAME"
ENV_LOG_PREFIX = "LOG_PREFIX"
ENV_DESTINATION = "DESTINATION"

DESTINATION_S3 = "s3"
DESTINATION_CLOUDWATCH = "cloudwatch"
DESTINATIONS = (DESTINATION_S3, DESTINATION_CLOUDWATCH)

DEFAULT_RECORD_ID_BASE = 10000000

# (env var, Config field, message shown when it is missing)
REQUIRED_SETTINGS = (
    (ENV_AWS_REGION, "region", "AWS Region required"),
    (ENV_S3_BUCKET, "bucket", "Bucket name required"),
    (ENV_CW_LOG_GROUP, "log_group", "Log group name required"),
    (ENV_LOG_PREFIX, "prefix", "Object prefix required"),
    (ENV_DESTINATION, "destination", "Log destination for validation required"),
)


@dataclass(frozen=True)
class Config:
    region: str
    bucket: str
    log_group: str
    prefix: str
    destination: str
    record_id_base: int = DEFAULT_RECORD_ID_BASE
    retry: RetryPolicy = field(default_factory=RetryPolicy)

    @property
    def log_stream(self) -> str:
        """CloudWatch stream name; the producer reuses the S3 prefix for it."""
        return self.prefix


def load_yaml_config(path: str | None) -> dict:
    """Load optional tunables from a YAML file. Returns empty dict if no path."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {path}") from None
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    logger.info("Loaded YAML config from %s", path)
    return data


def _number(raw, cast, name: str):
    try:
        value = cast(raw)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None
    if not math.isfinite(value):
        raise ConfigError(f"{name} must be a finite number, got {raw!r}")
    if value < 0:
        raise ConfigError(f"{name} must not be negative, got {raw!r}")
    return value


def load_config(environ: Mapping[str, str] | None = None, yaml_data: dict | None = None) -> Config:
    """Build Config from defaults <- YAML data <- env vars (highest priority).

    Raises ConfigError naming the first required variable that is unset.
    """
    if environ is None:
        environ = os.environ
    yaml_data = yaml_data or {}

    required = {}
    for env_name, attr, message in REQUIRED_SETTINGS:
        value = environ.get(env_name, "")
        if not value:
            raise ConfigError(f"{message}. Set the value for environment variable- {env_name}")
        required[attr] = value

    destination = required["destination"]
    if destination not in DESTINATIONS:
        raise ConfigError(
            f"Unsupported destination {destination!r}; "
            f"expected one of: {', '.join(DESTINATIONS)}"
        )

    retry_yaml = yaml_data.get("retry") or {}
    if not isinstance(retry_yaml, dict):
        raise ConfigError("'retry' section must be a mapping")

    defaults = RetryPolicy()
    retry = RetryPolicy(
        delay_seconds=_number(
            environ.get("RETRY_DELAY_SECONDS", retry_yaml.get("delay_seconds", defaults.delay_seconds)),
            float, "RETRY_DELAY_SECONDS",
        ),
        max_attempts=_number(
            environ.get("RETRY_MAX_ATTEMPTS", retry_yaml.get("max_attempts", defaults.max_attempts)),
            int, "RETRY_MAX_ATTEMPTS",
        ),
        max_duration_seconds=_number(
            environ.get(
                "RETRY_MAX_DURATION_SECONDS",
                retry_yaml.get("max_duration_seconds", defaults.max_duration_seconds),
            ),
            float, "RETRY_MAX_DURATION_SECONDS",
        ),
    )

    record_id_base = _number(
        environ.get("RECORD_ID_BASE", yaml_data.get("record_id_base", DEFAULT_RECORD_ID_BASE)),
        int, "RECORD_ID_BASE",
    )

    return Config(record_id_base=record_id_base, retry=retry, **required)
