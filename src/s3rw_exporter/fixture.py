"""Payloads read once at startup."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .config import ProbeConfig
from .utils.errors import ConfigError


@dataclass(frozen=True)
class Fixture:
    """Expected download content and the payload to upload."""

    download_expected: bytes
    upload_payload: bytes


def _read(path: str, purpose: str) -> bytes:
    try:
        return Path(path).read_bytes()
    except OSError as e:
        raise ConfigError(f"unable to read configured {purpose} file from path '{path}': {e}") from e


def load_fixture(config: ProbeConfig) -> Fixture:
    """Read both fixture files from the configured local paths.

    Raises:
        ConfigError: If either file cannot be read
    """
    return Fixture(
        download_expected=_read(config.s3.download_file_path, "download"),
        upload_payload=_read(config.s3.upload_file_path, "upload"),
    )
