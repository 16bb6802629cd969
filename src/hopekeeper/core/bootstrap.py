from __future__ import annotations
import logging
from pathlib import Path
from typing import Optional

from .config import GameConfig
from .engine import GameEngine
from .rng import get_seeded_rng
from ..events.loader import GameEventLoader
from ..events.scheduler import EventScheduler
from ..events.selection import get_strategy
from ..state.game_state import GameState
from ..ui.display import GameDisplay

logger = logging.getLogger(__name__)


def build_state(config: GameConfig) -> GameState:
    """Creates the starting game state: registries and declared variables."""
    state = GameState()
    if config.items:
        state.item_registry.load_from_yaml(Path(config.items))
    if config.statuses:
        state.status_registry.load_from_yaml(Path(config.statuses))
    for var in config.variables:
        state.define_var(var.name, var.initial, var.min, var.max)
    return state


async def new_game(
    config: GameConfig,
    display: Optional[GameDisplay] = None,
    loader: Optional[GameEventLoader] = None,
) -> GameEngine:
    state = build_state(config)
    loader = loader or GameEventLoader()
    events = await loader.load(config.events)
    scheduler = EventScheduler(
        events,
        rng=get_seeded_rng(config.seed),
        strategy=get_strategy(config.selection),
    )
    logger.info("New game with %d events, seed=%s, selection=%s", len(events), config.seed, config.selection)
    return GameEngine(state, scheduler, display, months_per_year=config.months_per_year)
