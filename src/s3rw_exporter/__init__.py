"""Synthetic read/write probe exporter for S3-compatible object stores."""

__version__ = "0.1.0"
