"""CLI: context-playground run, init, config validate, config show."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

import yaml

from ..config import CONFIG_FILENAMES, config_to_dict, load_config, validate_config


def _load_or_exit(args):
    try:
        config = load_config(args.config)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)
    errors = validate_config(config)
    if errors:
        print("Config validation errors:", file=sys.stderr)
        for err in errors:
            print(f"  - {err}", file=sys.stderr)
        sys.exit(1)
    return config


def cmd_run(args):
    """Launch the interactive playground, or replay a gesture script headless."""
    config = _load_or_exit(args)
    if args.seed is not None:
        config.seed = args.seed

    steps = None
    if args.replay:
        from ..tui.state import load_gesture_script

        replay_path = Path(args.replay)
        if not replay_path.exists():
            print(f"Replay file not found: {replay_path}", file=sys.stderr)
            sys.exit(1)
        try:
            steps = load_gesture_script(replay_path)
        except ValueError as e:
            print(f"Invalid replay file: {e}", file=sys.stderr)
            sys.exit(1)
        if not steps:
            print(f"No gesture steps found in: {replay_path}", file=sys.stderr)
            sys.exit(1)
        print(f"Loaded {len(steps)} steps from {replay_path}", file=sys.stderr)

    if args.headless:
        if not steps:
            print("--headless requires --replay <file>", file=sys.stderr)
            sys.exit(1)
        from ..tui.headless import HeadlessRunner

        runner = HeadlessRunner(config=config)
        runner.run(steps)
        if args.json:
            print(json.dumps(runner.state.snapshot().to_export_dict(), indent=2))
        return

    try:
        from ..tui.app import run_playground
    except ImportError:
        print(
            "TUI dependencies not installed. Run: pip install context-playground",
            file=sys.stderr,
        )
        sys.exit(1)

    run_playground(config=config, replay_steps=steps)


def cmd_init(args):
    """Write the default config to ./context-playground.yaml."""
    path = Path.cwd() / CONFIG_FILENAMES[0]
    if path.exists() and not args.force:
        print(f"{path.name} already exists. Use --force to overwrite.", file=sys.stderr)
        sys.exit(1)
    raw = config_to_dict(load_config(config_dict={}))
    path.write_text(yaml.safe_dump(raw, sort_keys=False))
    print(f"Wrote {path}")


def cmd_config_validate(args):
    """Validate config file."""
    try:
        config = load_config(args.config)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    errors = validate_config(config)
    if errors:
        print("Config validation errors:")
        for err in errors:
            print(f"  - {err}")
        sys.exit(1)
    else:
        low, high = config.token_cost_range
        print("Config is valid.")
        print(f"  Capacity: {config.capacity:,} tokens")
        print(f"  Token cost range: {low}-{high} ({config.token_source})")
        print(
            f"  Initial block: {config.initial_block.kind} "
            f"({config.initial_block.token_cost} tokens)"
        )


def cmd_config_show(args):
    """Print the effective config as YAML."""
    config = _load_or_exit(args)
    print(yaml.safe_dump(config_to_dict(config), sort_keys=False), end="")


def main():
    parser = argparse.ArgumentParser(
        prog="context-playground",
        description="Interactive context window playground",
    )
    parser.add_argument("--config", "-c", help="Path to config file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging to stderr")

    subparsers = parser.add_subparsers(dest="command")

    # run
    run_parser = subparsers.add_parser("run", help="Launch the interactive playground")
    run_parser.add_argument(
        "--replay", "-r", default=None,
        help="Gesture script to replay (YAML/JSON list or one step per line)",
    )
    run_parser.add_argument(
        "--headless",
        action="store_true",
        help="Run replay without TUI (requires --replay)",
    )
    run_parser.add_argument("--seed", type=int, default=None, help="Seed for token costs")
    run_parser.add_argument(
        "--json", action="store_true", help="Print the final snapshot as JSON (headless)"
    )

    # init
    init_parser = subparsers.add_parser("init", help="Write a default config file")
    init_parser.add_argument("--force", action="store_true", help="Overwrite existing config")

    # config validate / show
    config_parser = subparsers.add_parser("config", help="Config operations")
    config_sub = config_parser.add_subparsers(dest="config_command")
    config_sub.add_parser("validate", help="Validate config file")
    config_sub.add_parser("show", help="Show the effective config as YAML")

    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(levelname)s %(message)s",
            stream=sys.stderr,
        )

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == "run":
        cmd_run(args)
    elif args.command == "init":
        cmd_init(args)
    elif args.command == "config":
        if args.config_command == "validate":
            cmd_config_validate(args)
        elif args.config_command == "show":
            cmd_config_show(args)
        else:
            print("Usage: context-playground config {validate,show}")
            sys.exit(1)


if __name__ == "__main__":
    main()
