import pytest


@pytest.fixture(autouse=True)
def _test_env(monkeypatch):
    """
    Ensure tests never pick up real exchange credentials.
    """
    monkeypatch.setenv("MEXC_API_KEY", "test-key")
    monkeypatch.setenv("MEXC_API_SECRET", "test-secret")
    monkeypatch.setenv("QUOTE_CURRENCY", "USDT")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    for name in ("PORT", "HOST", "ALERT_PATH", "BALANCE_ACCOUNT_TYPE", "ENABLE_RATE_LIMIT"):
        monkeypatch.delenv(name, raising=False)
