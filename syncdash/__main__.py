"""
SyncDash headless runner.

Simulates a run with a ghost replaying the runner over a delayed link and
prints how closely the ghost kept up.

Examples:
  # Defaults (100ms delay, 5 seconds)
  python -m syncdash

  # Zero latency: the ghost snaps to every snapshot
  python -m syncdash --delay 0

  # Jumps at 1s and 2.5s, JSONL trace of every delivery
  python -m syncdash --jump-at 1.0 --jump-at 2.5 --trace --log-dir ./debug_logs
"""

import argparse
import json
import os
import sys
from typing import List, Optional

from models.sync import SessionConfig, SyncConfig
from syncdash.config import load_config, load_env
from syncdash.logging import close_all_sinks, configure_logging
from syncdash.session import SyncSession
from syncdash.sync.logger import create_trace_logger

ENV_LEVEL_VAR = 'SYNCDASH_LOG_LEVEL'
DEFAULT_LOG_LEVEL = 'WARNING'


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='syncdash',
        description='SyncDash - simulate ghost replication over a delayed link',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m syncdash --duration 10 --delay 0.25
  python -m syncdash --config config/default.yaml --no-interpolation
  python -m syncdash --jump-at 1.0 --json
        """
    )

    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help='YAML session configuration (default: built-in defaults)'
    )
    parser.add_argument(
        '--env-file',
        type=str,
        default=None,
        help='.env file with SYNCDASH_* overrides (default: .env at project root)'
    )
    parser.add_argument(
        '--duration',
        type=float,
        default=5.0,
        help='Simulated seconds to run (default: 5.0)'
    )

    # Link settings (override the config file)
    parser.add_argument(
        '--delay',
        type=float,
        default=None,
        help='Simulated latency in seconds, clamped to [0, 1]'
    )
    parser.add_argument(
        '--buffer-size',
        type=int,
        default=None,
        help='Snapshot history capacity'
    )
    parser.add_argument(
        '--no-interpolation',
        action='store_true',
        help='Disable snapshot interpolation (snap to latest)'
    )
    parser.add_argument(
        '--interpolation-rate',
        type=float,
        default=None,
        help='Ghost chase rate in 1/s'
    )

    # Runner input
    parser.add_argument(
        '--jump-at',
        type=float,
        action='append',
        default=[],
        metavar='SECONDS',
        help='Press jump at this session time (repeatable)'
    )

    # Output
    parser.add_argument(
        '--log-level',
        type=str,
        default=None,
        choices=['TRACE', 'DEBUG', 'INFO', 'WARNING', 'ERROR', 'OFF'],
        help='Console log level (default: SYNCDASH_LOG_LEVEL, else WARNING)'
    )
    parser.add_argument(
        '--log-dir',
        type=str,
        default=None,
        help='Directory for JSONL trace files'
    )
    parser.add_argument(
        '--trace',
        action='store_true',
        help='Write a JSONL trace of submissions and deliveries'
    )
    parser.add_argument(
        '--json',
        action='store_true',
        help='Print the result summary as JSON'
    )
    return parser


def resolve_config(args: argparse.Namespace) -> SessionConfig:
    """Config file (or defaults) with command-line overrides applied."""
    config = load_config(args.config) if args.config else SessionConfig()

    overrides = {}
    if args.delay is not None:
        overrides['delay'] = args.delay
    if args.buffer_size is not None:
        overrides['buffer_capacity'] = args.buffer_size
    if args.no_interpolation:
        overrides['interpolation_enabled'] = False
    if args.interpolation_rate is not None:
        overrides['interpolation_rate'] = args.interpolation_rate

    if overrides:
        # Re-validate so the delay clamp and range checks still apply
        sync = SyncConfig.model_validate({**config.sync.model_dump(), **overrides})
        config = config.model_copy(update={'sync': sync})
    return config


def format_summary(result_dict: dict) -> str:
    lines = [
        "SyncDash run",
        f"  frames:          {result_dict['frames']}",
        f"  duration:        {result_dict['duration']:.2f}s",
        f"  final score:     {result_dict['final_score']}",
        f"  submitted:       {result_dict['submitted']}",
        f"  delivered:       {result_dict['delivered']}",
        f"  dropped:         {result_dict['dropped']}",
        f"  in flight:       {result_dict['in_flight']}",
        f"  jumps:           {result_dict['jumps']}",
        f"  jump overrides:  {result_dict['jump_overrides']}",
        f"  final lag:       {result_dict['final_lag']:.3f}",
        f"  max lag:         {result_dict['max_lag']:.3f}",
    ]
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the headless runner."""
    parser = build_parser()
    args = parser.parse_args(argv)

    load_env(args.env_file)
    # An explicit flag beats SYNCDASH_LOG_LEVEL from the environment or .env
    level = args.log_level or os.environ.get(ENV_LEVEL_VAR, DEFAULT_LOG_LEVEL)
    configure_logging(level=level, log_dir=args.log_dir)

    try:
        config = resolve_config(args)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    trace = create_trace_logger(force=args.trace)
    try:
        session = SyncSession(config, trace=trace)
        result = session.run(args.duration, jump_times=args.jump_at)
        session.finish()
        trace.close()
        trace_path = trace.log_path
    finally:
        close_all_sinks()

    summary = result.to_dict()
    if args.json:
        print(json.dumps(summary, indent=2))
    else:
        print(format_summary(summary))
        if trace_path:
            print(f"  trace:           {trace_path}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
