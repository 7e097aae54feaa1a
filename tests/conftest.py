from __future__ import annotations

import os

import pytest


@pytest.fixture(autouse=True)
def _isolated_dkg_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in [name for name in os.environ if name.startswith("DKG_")]:
        monkeypatch.delenv(name)
