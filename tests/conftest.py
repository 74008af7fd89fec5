import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@pytest.fixture(autouse=True)
def isolated_market_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "HEROMARKET_DATABASE_URL",
        "HEROMARKET_TRAINING_GAIN_MODE",
        "HEROMARKET_TRAINING_SEED",
        "HEROMARKET_TRAINING_HISTORY_MAX",
        "HEROMARKET_PRINCIPAL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HEROMARKET_DB_CONNECT_PROBE_TIMEOUT_S", "0.05")


@pytest.fixture(autouse=True)
def no_dotenv(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("heromarket.__main__.load_dotenv", lambda *_args, **_kwargs: False)
