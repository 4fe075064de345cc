"""
Main entry point for running Word Battle matches.

Usage:
    python -m wordbattle.main config.yaml
    python -m wordbattle.main config.yaml --output results/run1.json --verbose
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

import yaml

from .environment import MatchConfig, WordBattle


def load_config(config_path: str) -> MatchConfig:
    """Load match configuration from a YAML file."""
    path = Path(config_path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    return MatchConfig(**data)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Run a Word Battle match between AI players",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Example config.yaml:
  mode: journey
  level_id: 2
  seed: 42
  max_turns: 50
  players:
    - difficulty: medium
    - difficulty: easy
        """
    )
    parser.add_argument(
        "config",
        help="Path to YAML configuration file"
    )
    parser.add_argument(
        "--output", "-o",
        help="Path to save results JSON (default: results/match_<timestamp>.json)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Print progress to stdout"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)"
    )
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config)
        battle = WordBattle.create(config=config)
    except Exception as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    if args.output:
        output_path = Path(args.output)
    else:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        output_path = Path("results") / f"match_{timestamp}.json"

    if args.verbose:
        print(f"Config: {args.config}")
        print(f"Output: {output_path}")
        print()

    battle.setup()
    try:
        result = battle.run(verbose=args.verbose)
    except KeyboardInterrupt:
        print("\nMatch interrupted by user")
        result = battle.get_result()
    except Exception as e:
        logging.getLogger(__name__).exception("Match failed")
        print(f"Error during match: {e}", file=sys.stderr)
        result = battle.get_result()

    battle.save_result(output_path)

    if args.verbose:
        print()
        print(f"Results saved to: {output_path}")

    print()
    print("=== Match Summary ===")
    print(f"Total turns: {result.total_turns}")
    print(f"End reason: {result.end_reason or 'unfinished'}")
    print(f"Duration: {result.duration_seconds:.2f}s")
    if result.winner:
        print(f"Winner: {result.winner}")
    for player_id, player in result.player_results.items():
        print(f"{player['name']} ({player_id}): {player['score']} points")

    return 0


if __name__ == "__main__":
    sys.exit(main())
