#!/usr/bin/env python3
"""
Metamorphic slicer test driver
"""

import sys
import time
import argparse
from typing import List, Optional

from mutation import MutationKind
from .config_parser import ConfigParser
from .orchestrator import BatchSummary, Orchestrator
from .log import log_error, log_info, log_success, log_warning, setup_logging


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Metamorphic testing of a static Java slicer')
    parser.add_argument('--config', help='YAML configuration file (default: driver/config.yaml)')
    parser.add_argument('--count', type=int, help='Number of generated baselines')
    parser.add_argument('--seed', type=int, help='Base random seed')
    parser.add_argument('--kinds', nargs='+', metavar='KIND',
                        help=f"Mutation kinds: {', '.join(k.value for k in MutationKind)}")
    parser.add_argument('--input-dir', help='Read baselines from .java files instead of generating them')
    parser.add_argument('--output-dir', help='Directory for baselines, mutants and the report')
    parser.add_argument('--workers', type=int, help='Worker threads (default: CPU count)')
    parser.add_argument('--timeout', type=float, help='Seconds allowed per slicer call')
    parser.add_argument('--dump-graph', action='store_true', default=None,
                        help='Write the dependency graph of each unit as a .dot file')
    parser.add_argument('--no-color', action='store_true', help='Disable colored console output')
    parser.add_argument('-v', '--verbose', action='store_true', help='Show debug output')
    return parser


def print_summary(summary: BatchSummary, total_time: float):
    """Print verdict counts"""
    log_info("=" * 50)
    log_info(f"Units: {summary.total} ({total_time:.1f}s)")
    log_info(f"  pass: {summary.passed}")
    log_info(f"  fail: {summary.failed}")
    log_info(f"  inconclusive: {summary.inconclusive}")
    log_info(f"  not applicable: {summary.not_applicable}")
    log_info(f"  error: {summary.errors}")
    if summary.pass_rate is None:
        log_warning("No unit tested the metamorphic relation")
    else:
        log_info(f"Pass rate: {summary.pass_rate:.1%} of {summary.tested} tested units")


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point

    Returns:
        0 when no unit failed, 1 when the slicer disagreed with itself on some unit, 2 on setup errors
    """
    args = build_arg_parser().parse_args(argv)
    setup_logging(verbose=args.verbose, enable_colors=not args.no_color)
    start_time = time.time()

    try:
        config = ConfigParser(args.config).to_run_config(
            count=args.count,
            seed=args.seed,
            kinds=args.kinds,
            input_dir=args.input_dir,
            output_dir=args.output_dir,
            workers=args.workers,
            timeout=args.timeout,
            dump_graph=args.dump_graph,
        )
    except (FileNotFoundError, ValueError) as e:
        log_error(f"Invalid configuration: {e}")
        return 2
    log_success("Configuration parsed successfully.")

    orchestrator = Orchestrator(config)
    if config.input_dir:
        baselines = orchestrator.load_baselines(config.input_dir)
    else:
        baselines = orchestrator.generate_baselines()
    log_info(f"{len(baselines)} baselines, kinds: {', '.join(k.value for k in config.kinds)}")

    results = orchestrator.run(baselines)
    summary = BatchSummary.from_results(results)
    print_summary(summary, time.time() - start_time)

    if config.write_report:
        report = orchestrator.write_report(results, summary)
        log_info(f"Report written to {report}")

    return 1 if summary.failed else 0


if __name__ == "__main__":
    sys.exit(main())
