import pytest


@pytest.fixture(autouse=True)
def _isolate_sigmarshal_env(monkeypatch):
    # Struct naming reads the environment; keep tests independent of the caller's shell.
    monkeypatch.delenv("SIGMARSHAL_STRUCT_PREFIX", raising=False)
    yield
