"""Builders turning configuration into runtime objects."""

from .store import create_store_from_config

__all__ = ["create_store_from_config"]
