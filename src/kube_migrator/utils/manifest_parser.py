"""Fetch and parse multi-document YAML manifests."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import httpx
import yaml

from kube_migrator.config.settings import settings
from kube_migrator.core.errors import ManifestError

logger = logging.getLogger(__name__)

# Prefer the C-accelerated YAML loader when available.
_YamlLoader = getattr(yaml, "CSafeLoader", yaml.SafeLoader)


def parse_manifest(text: str) -> list[dict[str, Any]]:
    """Parse a multi-document YAML string into one mapping per document."""
    docs: list[dict[str, Any]] = []
    if not text:
        return docs
    try:
        for doc in yaml.load_all(text, Loader=_YamlLoader):
            if doc is None:
                continue
            if not isinstance(doc, dict):
                raise ManifestError(f"Manifest document is not a mapping: {type(doc).__name__}")
            docs.append(doc)
    except yaml.YAMLError as e:
        raise ManifestError(f"Invalid YAML: {e}") from e
    return docs


def _read_locator(locator: str) -> str:
    parsed = urlparse(locator)
    if parsed.scheme in ("http", "https"):
        try:
            response = httpx.get(locator, timeout=settings.manifest_timeout, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ManifestError(f"Could not download manifest {locator}: {e}") from e
        return response.text
    path = Path(parsed.path) if parsed.scheme == "file" else Path(locator)
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestError(f"Could not read manifest {locator}: {e}") from e


def fetch_manifest(locator: str) -> list[dict[str, Any]]:
    """Load a manifest from an http(s) URL, a file:// URL or a local path."""
    docs = parse_manifest(_read_locator(locator))
    logger.info("Fetched %d document(s) from %s", len(docs), locator)
    return docs

