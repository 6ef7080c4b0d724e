"""Command-line interface for world generation."""

import argparse
import logging
import time
from pathlib import Path

import structlog

from ..config import RevealConfig, WorldGenConfig, load_config


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for world generation."""
    parser = argparse.ArgumentParser(
        description="Generate a procedural world map"
    )
    parser.add_argument(
        "--config", "-c", type=str, default=None, help="TOML config file (optional)"
    )
    parser.add_argument(
        "--width", type=int, default=None, help="World width (default: from config)"
    )
    parser.add_argument(
        "--height", type=int, default=None, help="World height (default: from config)"
    )
    parser.add_argument(
        "--seed", type=int, default=None, help="Random seed (default: from config)"
    )
    parser.add_argument(
        "--settlements",
        type=int,
        default=None,
        help="Number of settlement candidates (default: random from config range)",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        default="saves/world.npz",
        help="Output path (default: saves/world.npz)",
    )
    parser.add_argument(
        "--reveal",
        action="store_true",
        help="Run the incremental reveal and report its progress",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Verbose logging"
    )

    args = parser.parse_args(argv)

    # Configure logging
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )

    # Import here to avoid slow startup for --help
    from .generator import generate_world, place_settlements_on, synthesize
    from .persistence import save_snapshot

    config = load_config(Path(args.config)) if args.config else WorldGenConfig()
    overrides = {
        key: value
        for key, value in (("width", args.width), ("height", args.height), ("seed", args.seed))
        if value is not None
    }
    if overrides:
        config = WorldGenConfig.model_validate(config.model_dump() | overrides)

    output_path = Path(args.output)

    print(f"Generating {config.width}x{config.height} world with seed {config.seed}")
    print(f"Output: {output_path}")
    print()

    start_time = time.time()
    if args.settlements is None:
        snapshot = generate_world(config)
    else:
        snapshot = synthesize(config.width, config.height, config.seed, config)
        place_settlements_on(snapshot, args.settlements, config=config)
    gen_time = time.time() - start_time

    print()
    print(
        f"Generation complete in {gen_time:.1f}s "
        f"({len(snapshot.settlements)} settlements)"
    )

    if args.reveal:
        _run_reveal(snapshot.width, snapshot.height, config.reveal)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    save_snapshot(output_path, snapshot)

    print(f"Saved to {output_path}")


def _run_reveal(width: int, height: int, config: RevealConfig) -> None:
    """Reveal the map on a worker thread; Ctrl-C cancels it."""
    from ..reveal import RevealController, RevealWorker

    def report(visited: int, total: int) -> None:
        print(f"\rRevealed {visited:,}/{total:,} cells ({visited / total:.0%})", end="")

    controller = RevealController.from_config(width, height, config, report)
    worker = RevealWorker(controller, pause_s=config.pause_ms / 1000)
    worker.start()

    try:
        while worker.is_alive:
            worker.join(timeout=0.1)
    except KeyboardInterrupt:
        worker.cancel()
        worker.join()

    print()
    print(f"Reveal finished: {controller.state.name.lower()}")


if __name__ == "__main__":
    main()
