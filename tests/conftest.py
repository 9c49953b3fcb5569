from __future__ import annotations

import pytest

from kube_migrator.config.settings import Settings


@pytest.fixture
def config() -> Settings:
    return Settings(
        proxy_manifest_url="https://manifests.example.com/http-proxy.yaml",
        proxy_port=9090,
        proxy_namespace="proxy",
        proxy_config_name="http-proxy-config",
        max_workers=2,
    )
