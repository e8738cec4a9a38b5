from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's SAM_* / REDIS_URL settings from leaking into tests.

    Tests that exercise env-driven configuration set what they need explicitly.
    """

    for name in ("SAM_DEBUG", "SAM_HISTORY_STREAM", "REDIS_URL"):
        monkeypatch.delenv(name, raising=False)
