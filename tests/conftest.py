"""Root test configuration: isolate every test from the caller's environment and config files"""

import os

import pytest


_ENV_PREFIXES = ("CMSFIX_", "SANITY_", "NEXT_PUBLIC_SANITY_")


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Run from an empty tmp directory with no Sanity or cmsfix variables set."""
    for name in list(os.environ):
        if name.startswith(_ENV_PREFIXES):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
