"""Ingestion layer.

This package contains the helpers that turn raw live-location payloads into
typed models before they reach the state store.
"""

__all__: list[str] = []
