"""Main entry point for the sparkling simulation.

This module provides command-line options to run the simulation:
- Web mode (default): FastAPI backend with the state API and inference relay
- Headless mode: Stats-only, faster than realtime for testing
"""

import argparse
import dataclasses
import logging
import sys

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
)

logger = logging.getLogger(__name__)

SEPARATOR_WIDTH = 60


def run_web_server():
    """Run the FastAPI backend."""
    from backend.main import app, serve

    port = app.state.context.api_port

    logger.info("=" * SEPARATOR_WIDTH)
    logger.info("SPARKLING SIMULATION - WEB SERVER")
    logger.info("=" * SEPARATOR_WIDTH)
    logger.info("State API at http://localhost:%d/api/state", port)
    logger.info("API docs available at http://localhost:%d/docs", port)
    logger.info("Press Ctrl+C to stop the server")
    logger.info("=" * SEPARATOR_WIDTH)

    serve(port=port)


def log_stats(stats):
    states = ", ".join(f"{name}={count}" for name, count in stats["states"].items() if count)
    inference = stats["inference"]
    logger.info(
        "t=%.1fs tick=%d live=%d food=%.0f energy=%.0f territories=%d",
        stats["time"],
        stats["tick"],
        stats["live"],
        stats["world_food"],
        stats["world_neural_energy"],
        stats["territories"],
    )
    logger.info("  states: %s", states or "-")
    logger.info(
        "  inference: %d total, %d ok, %d failed, %d timeouts, avg latency %.3fs",
        inference["total"],
        inference["successful"],
        inference["failed"],
        inference["timeouts"],
        inference["average_latency"],
    )


def run_headless(ticks, stats_interval, seed=None, export_stats=None, strategy=None, population=None):
    """Run the simulation without the server.

    Args:
        ticks: Number of ticks to simulate
        stats_interval: Log stats every N ticks (0 disables)
        seed: Optional random seed for reproducible runs
        export_stats: Optional filename to export final JSON stats
        strategy: Optional inference strategy override ("local" or "remote")
        population: Optional initial population override
    """
    from sparkling.config.simulation_config import SimulationConfig
    from sparkling.exceptions import ConfigurationError
    from sparkling.simulation import SimulationEngine

    config = SimulationConfig.from_env()
    if strategy is not None:
        config = config.with_overrides(inference=dataclasses.replace(config.inference, strategy=strategy))
    if population is not None:
        config = config.with_overrides(
            population=dataclasses.replace(config.population, initial_count=population)
        )

    try:
        engine = SimulationEngine(config, seed=seed)
        engine.setup()
    except ConfigurationError as e:
        logger.error("Invalid configuration: %s", e)
        sys.exit(2)

    with engine:
        for _ in range(ticks):
            engine.update()
            if stats_interval and engine.tick_count % stats_interval == 0:
                log_stats(engine.get_stats())

        logger.info("Finished %d ticks", engine.tick_count)
        log_stats(engine.get_stats())
        if export_stats:
            engine.export_stats_json(export_stats)


def main():
    """Parse command-line arguments and run the appropriate mode."""
    from sparkling.config.engine import DEFAULT_HEADLESS_TICKS, DEFAULT_STATS_INTERVAL

    parser = argparse.ArgumentParser(
        description="Sparkling Field Simulation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run web server (default)
  python main.py

  # Quick headless run
  python main.py --headless --ticks 1000

  # Reproducible run with exported stats
  python main.py --headless --ticks 9000 --seed 42 --export-stats run.json

  # Remote reasoning (needs ANTHROPIC_API_KEY or a relay endpoint)
  python main.py --headless --strategy remote
        """,
    )

    parser.add_argument("--headless", action="store_true", help="Run in headless mode (no server, stats only)")
    parser.add_argument(
        "--ticks",
        type=int,
        default=DEFAULT_HEADLESS_TICKS,
        help=f"Ticks to simulate in headless mode (default: {DEFAULT_HEADLESS_TICKS})",
    )
    parser.add_argument(
        "--stats-interval",
        type=int,
        default=DEFAULT_STATS_INTERVAL,
        help=f"Log stats every N ticks in headless mode (default: {DEFAULT_STATS_INTERVAL})",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible runs (optional)")
    parser.add_argument(
        "--strategy",
        choices=("local", "remote"),
        default=None,
        help="Inference strategy (default: SPARKLING_INFERENCE_STRATEGY or local)",
    )
    parser.add_argument("--population", type=int, default=None, help="Initial number of sparklings")
    parser.add_argument(
        "--export-stats",
        type=str,
        default=None,
        metavar="FILENAME",
        help="Export final stats to a JSON file (e.g., results.json)",
    )

    args = parser.parse_args()

    if args.headless:
        logger.info("Starting headless simulation: %d ticks, stats every %d", args.ticks, args.stats_interval)
        if args.export_stats:
            logger.info("Stats will be exported to: %s", args.export_stats)
        run_headless(
            args.ticks,
            args.stats_interval,
            seed=args.seed,
            export_stats=args.export_stats,
            strategy=args.strategy,
            population=args.population,
        )
    else:
        run_web_server()


if __name__ == "__main__":
    main()
