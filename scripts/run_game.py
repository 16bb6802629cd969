import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add the project root to the Python path
sys.path.append(str(Path(__file__).parent.parent))

from src.hopekeeper.core.bootstrap import new_game
from src.hopekeeper.core.config import load_config
from src.hopekeeper.core.errors import HopekeeperError
from src.hopekeeper.reports.chronicle import generate_chronicle
from src.hopekeeper.ui.display import AutoDisplay, ConsoleDisplay


async def run(args) -> int:
    config = load_config(Path(args.config))
    if args.seed is not None:
        config.seed = args.seed
    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    display = AutoDisplay(print_fn=print) if args.auto else ConsoleDisplay()
    engine = await new_game(config, display=display)
    print(f"Loaded '{config.events}' with seed {config.seed}.")

    report = await engine.start()
    print(generate_chronicle(report.log, engine.year, engine.month))
    for _ in range(args.months):
        report = await engine.advance_month()
        print(generate_chronicle(report.log, engine.year, engine.month))
    return 0


def main():
    parser = argparse.ArgumentParser(description="Run the hopekeeper event engine.")
    parser.add_argument(
        "--config",
        type=str,
        default="data/game.yaml",
        help="Path to the game config YAML file.",
    )
    parser.add_argument(
        "--months", type=int, default=12, help="Number of months to play."
    )
    parser.add_argument(
        "--seed", type=int, default=None, help="Override the configured rng seed."
    )
    parser.add_argument(
        "--auto", action="store_true", help="Acknowledge messages and take the first choice automatically."
    )
    args = parser.parse_args()

    try:
        sys.exit(asyncio.run(run(args)))
    except HopekeeperError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
