from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def isolated_config_dir(monkeypatch, tmp_path_factory):
    """Keep settings-driven cache files out of the real home directory."""

    monkeypatch.setenv("IMGTOSS_CONFIG_DIR", str(tmp_path_factory.mktemp("imgtoss")))
