from pathlib import Path
from typing import Any, Dict, List

import pytest

from src.hopekeeper.events.loader import GameEventLoader
from src.hopekeeper.events.model import GameEvent
from src.hopekeeper.state.game_state import GameState

DATA_DIR = Path(__file__).resolve().parents[1] / "data"


@pytest.fixture
def data_dir() -> Path:
    return DATA_DIR


@pytest.fixture
def loader() -> GameEventLoader:
    return GameEventLoader()


@pytest.fixture
def game_state() -> GameState:
    state = GameState()
    state.item_registry.load_from_yaml(DATA_DIR / "items.yaml")
    state.status_registry.load_from_yaml(DATA_DIR / "statuses.yaml")
    state.define_var("player.hope", 60, 0, 100)
    state.define_var("player.food", 20, 0, 50)
    return state


@pytest.fixture
def make_events(loader):
    """Parses a list of event records with the default factories."""
    def _make(records: List[Dict[str, Any]]) -> List[GameEvent]:
        return loader.parse_events(records)
    return _make
