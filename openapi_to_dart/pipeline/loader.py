"""
Loading of API description documents from a local path or a URL.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import requests
import yaml

from .errors import SpecLoadError

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30


def is_remote(source: str) -> bool:
    return source.startswith("http://") or source.startswith("https://")


def load_spec(source: str | Path) -> dict[str, Any]:
    """
    Load a Swagger/OpenAPI document.

    Args:
        source: Local file path or http(s) URL

    Returns:
        The decoded document

    Raises:
        SpecLoadError: If the document cannot be fetched, read or decoded
    """
    source = str(source)
    if is_remote(source):
        logger.debug("Fetching specification from %s", source)
        try:
            response = requests.get(source, timeout=REQUEST_TIMEOUT)
        except requests.RequestException as e:
            raise SpecLoadError(f"Failed to fetch specification from {source}: {e}") from e
        if response.status_code >= 400:
            raise SpecLoadError(f"Failed to fetch specification from {source} (status: {response.status_code})")
        return decode_spec(response.text, source_hint=source)

    path = Path(source)
    if not path.exists():
        raise SpecLoadError(f"Specification file not found: {source}")
    logger.debug("Reading specification from %s", path)
    return decode_spec(path.read_text(encoding="utf-8"), source_hint=source)


def decode_spec(content: str, source_hint: str = "") -> dict[str, Any]:
    """Decode document text as YAML (``.yaml``/``.yml`` sources) or JSON."""
    lower = source_hint.lower().split("?", 1)[0]
    try:
        if lower.endswith(".yaml") or lower.endswith(".yml"):
            document = yaml.safe_load(content)
        else:
            document = json.loads(content)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise SpecLoadError(f"Failed to decode specification {source_hint}: {e}") from e

    if not isinstance(document, dict):
        raise SpecLoadError(f"Specification root must be a mapping: {source_hint}")
    return document
