import pytest


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep PTBR_* settings from the outer environment out of the tests."""
    for var in ('PTBR_RECURSION_LIMIT', 'PTBR_STRICT_DEFINITIONS', 'PTBR_DEBUG'):
        monkeypatch.delenv(var, raising=False)
