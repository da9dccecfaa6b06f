"""Configuration loading and validation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .constants import (
    DEFAULT_LOG_LEVEL,
    DEFAULT_MULTIPART_CONCURRENCY,
    DEFAULT_MULTIPART_PART_SIZE,
    DEFAULT_NAMESPACE,
    MIN_MULTIPART_PART_SIZE,
)
from .utils.durations import parse_duration
from .utils.errors import ConfigError, sanitize_dict

logger = logging.getLogger(__name__)

# Mandatory keys, checked in this order
_S3_REQUIRED = (
    "url",
    "bucket",
    "region",
    "download_file_name",
    "download_file_path",
    "upload_file_name",
    "upload_file_path",
    "api_key",
    "secret_access_key",
)


@dataclass(frozen=True)
class S3Settings:
    """Object store endpoint, credentials, object keys and probe toggles."""

    url: str
    region: str
    bucket: str
    download_key: str
    download_file_path: str
    upload_key: str
    upload_file_path: str
    access_key: str
    secret_key: str
    multipart_upload_enabled: bool = False
    versioning_check_enabled: bool = False
    locking_object_check_enabled: bool = False
    force_path_style: bool = False
    timeout_seconds: float | None = None
    multipart_part_size: int = DEFAULT_MULTIPART_PART_SIZE
    multipart_concurrency: int = DEFAULT_MULTIPART_CONCURRENCY

    def __repr__(self) -> str:
        return (
            f"S3Settings(url={self.url!r}, region={self.region!r}, bucket={self.bucket!r}, "
            f"access_key='***REDACTED***', secret_key='***REDACTED***')"
        )


@dataclass(frozen=True)
class ExporterSettings:
    """Metrics endpoint and cycle interval."""

    port: int
    path: str
    interval_seconds: float
    namespace: str = DEFAULT_NAMESPACE


@dataclass(frozen=True)
class LogSettings:
    level: str = DEFAULT_LOG_LEVEL
    json: bool = False


@dataclass(frozen=True)
class ProbeConfig:
    """Validated, immutable process configuration."""

    s3: S3Settings
    exporter: ExporterSettings
    log: LogSettings

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProbeConfig:
        """Build and validate a configuration from a parsed document.

        Args:
            data: Parsed configuration mapping

        Returns:
            Validated configuration

        Raises:
            ConfigError: If a mandatory key is missing or a value is invalid
        """
        if not isinstance(data, dict):
            raise ConfigError("configuration root must be a mapping")

        try:
            s3 = _build_s3(_section(data, "s3"))
        except ConfigError as e:
            raise ConfigError(f"invalid s3 configuration: {e}") from e
        try:
            exporter = _build_exporter(_section(data, "exporter"))
        except ConfigError as e:
            raise ConfigError(f"invalid exporter configuration: {e}") from e
        try:
            log = _build_log(_section(data, "log"))
        except ConfigError as e:
            raise ConfigError(f"invalid log configuration: {e}") from e

        return cls(s3=s3, exporter=exporter, log=log)


def load_config(path: str | Path) -> ProbeConfig:
    """Load and validate the configuration file.

    YAML is parsed with ``yaml.safe_load``; JSON documents load through the
    same call.

    Args:
        path: Path to the configuration file

    Returns:
        Validated configuration

    Raises:
        ConfigError: If the file cannot be read, parsed or validated
    """
    try:
        content = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"unable to read configuration file '{path}': {e}") from e

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(f"unable to parse configuration file '{path}': {e}") from e

    if data is None:
        raise ConfigError(f"configuration file '{path}' is empty")

    if isinstance(data, dict):
        logger.debug(f"Loaded configuration from {path}: {sanitize_dict(data)}")

    return ProbeConfig.from_dict(data)


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"section '{name}' must be a mapping")
    return section


def _flag(section: dict[str, Any], key: str, prefix: str = "s3") -> bool:
    value = section.get(key, False)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ConfigError(f"key {prefix}.{key} must be a boolean")
    return value


def _build_s3(section: dict[str, Any]) -> S3Settings:
    for key in _S3_REQUIRED:
        value = section.get(key)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ConfigError(f"missing mandatory key s3.{key}")

    timeout = section.get("timeout_seconds")
    if timeout is not None:
        try:
            timeout = parse_duration(timeout)
        except ValueError as e:
            raise ConfigError(f"key s3.timeout_seconds: {e}") from e
        if timeout <= 0:
            raise ConfigError("key s3.timeout_seconds must be positive")

    part_size = section.get("multipart_part_size", DEFAULT_MULTIPART_PART_SIZE)
    if not isinstance(part_size, int) or isinstance(part_size, bool) or part_size < MIN_MULTIPART_PART_SIZE:
        raise ConfigError(
            f"key s3.multipart_part_size must be an integer >= {MIN_MULTIPART_PART_SIZE}"
        )

    concurrency = section.get("multipart_concurrency", DEFAULT_MULTIPART_CONCURRENCY)
    if not isinstance(concurrency, int) or isinstance(concurrency, bool) or concurrency < 1:
        raise ConfigError("key s3.multipart_concurrency must be an integer >= 1")

    return S3Settings(
        url=str(section["url"]),
        region=str(section["region"]),
        bucket=str(section["bucket"]),
        download_key=str(section["download_file_name"]),
        download_file_path=str(section["download_file_path"]),
        upload_key=str(section["upload_file_name"]),
        upload_file_path=str(section["upload_file_path"]),
        access_key=str(section["api_key"]),
        secret_key=str(section["secret_access_key"]),
        multipart_upload_enabled=_flag(section, "enable_multipart_upload_check"),
        versioning_check_enabled=_flag(section, "enable_versionning_check"),
        locking_object_check_enabled=_flag(section, "enable_locking_object_check"),
        force_path_style=_flag(section, "s3_force_path_style"),
        timeout_seconds=timeout,
        multipart_part_size=part_size,
        multipart_concurrency=concurrency,
    )


def _build_exporter(section: dict[str, Any]) -> ExporterSettings:
    path = section.get("path")
    if not path:
        raise ConfigError("missing key 'exporter.path'")
    if not str(path).startswith("/"):
        raise ConfigError("key 'exporter.path' must start with '/'")

    port = section.get("port")
    if not port:
        raise ConfigError("missing or zero key 'exporter.port'")
    if not isinstance(port, int) or isinstance(port, bool) or not 0 < port < 65536:
        raise ConfigError(f"invalid port {port!r} for key 'exporter.port'")

    raw_interval = section.get("interval_duration")
    if not raw_interval:
        raise ConfigError("missing or zero key 'exporter.interval_duration'")
    try:
        interval = parse_duration(raw_interval)
    except ValueError as e:
        raise ConfigError(f"key 'exporter.interval_duration': {e}") from e
    if interval <= 0:
        raise ConfigError("key 'exporter.interval_duration' must be positive")

    namespace = section.get("namespace") or DEFAULT_NAMESPACE

    return ExporterSettings(
        port=port,
        path=str(path),
        interval_seconds=interval,
        namespace=str(namespace),
    )


def _build_log(section: dict[str, Any]) -> LogSettings:
    level = str(section.get("level") or DEFAULT_LOG_LEVEL).lower()
    if level == "warn":
        level = "warning"
    if level not in ("debug", "info", "warning", "error", "critical"):
        raise ConfigError(f"unknown log level {level!r}")
    return LogSettings(level=level, json=_flag(section, "json", prefix="log"))
