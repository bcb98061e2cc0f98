"""Command line interface: run registered suites against a simulated feed."""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from .config import RunConfig
from .discovery import discover
from .feed import BarFeedModel, run_feed
from .logging_util import setup_logging
from .registry import TestRegistry
from .report import ConsoleSink

DEFAULT_MODULES = ["bartest.demo"]
PRESETS = ["default", "every_bar", "quiet", "immediate", "strict"]


def build_registry(modules: List[str]) -> TestRegistry:
    registry = TestRegistry()
    for module_name in modules:
        registry.include_module(module_name)
    return registry


def build_config(args) -> RunConfig:
    overrides = {}
    if args.start_bar is not None:
        overrides['start_test_at_bar'] = args.start_bar
    if args.every_bar:
        overrides['run_tests_once'] = False
    for key, value in (('name_filter', args.name), ('namespace_filter', args.namespace),
                       ('tag_filter', args.tag), ('category_filter', args.category)):
        if value:
            overrides[key] = value
    if args.timestamps:
        overrides['enable_timestamps'] = True
    if args.strict:
        overrides['distinguish_errors'] = True

    if args.config:
        return RunConfig.from_file(args.config, overrides)

    config = RunConfig.create_preset(args.preset, **overrides)
    config.validate()
    return config


def command_run(args) -> int:
    config = build_config(args)
    registry = build_registry(args.module or DEFAULT_MODULES)
    bars = args.bars if args.bars is not None else config.start_test_at_bar + 1

    feed = run_feed(
        bars,
        config=config,
        registry=registry,
        sink=ConsoleSink(),
        seed=args.seed,
        volatility_daily=args.volatility,
        initial_price=args.price,
    )

    if not feed.reports:
        print(f"No run triggered: {bars} bars generated, tests start at bar {config.start_test_at_bar}")
        return 1

    if args.output:
        path = Path(args.output)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(feed.runner.test_logger.export_text(), encoding="utf-8")
        print(f"Report saved: {path}")

    failing = [r for r in feed.reports if not r.summary.all_passed]
    return 1 if failing else 0


def command_list(args) -> int:
    config = build_config(args)
    registry = build_registry(args.module or DEFAULT_MODULES)

    model = BarFeedModel({'seed': args.seed, 'registry': registry})
    model.sim_setup(steps=args.bars)
    for _ in range(args.bars):
        model.step()

    found = discover(registry, config, model.host)
    print(f"Discovered {len(found.suites)} suite(s) with {found.total_units} unit(s) "
          f"at bar {model.host.current_bar}\n")
    for suite in found.suites:
        gate = f"  [skipped: {suite.gate_reason}]" if suite.is_gated else ""
        print(f"{suite.namespace}.{suite.name} - {suite.tag}{gate}")
        for unit in suite.units:
            print(f"   • {unit.display_name}" + (f" [SKIPPED: {unit.tag.skip}]" if unit.tag.should_skip else ""))
    for namespace in found.skipped_groups:
        print(f"[WARNING] Could not load {namespace}")
    return 0


def command_config(args) -> int:
    if args.list:
        print("Available presets:\n")
        for name in PRESETS:
            print(f"{name}")
            for key, value in RunConfig.create_preset(name).to_dict().items():
                if value != getattr(RunConfig(), key):
                    print(f"   • {key}: {value}")
            print()
        return 0

    config = RunConfig.from_file(args.file) if args.file else RunConfig.create_preset(args.preset)
    print(json.dumps({"run_config": config.to_dict()}, indent=2))
    return 0


def add_selection_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--module', '-m', action='append',
                        help='Module providing register_suites() (repeatable, default: bartest.demo)')
    parser.add_argument('--config', help='JSON run configuration file')
    parser.add_argument('--preset', default='default', choices=PRESETS, help='Run configuration preset')
    parser.add_argument('--start-bar', type=int, help='First bar at which tests run')
    parser.add_argument('--every-bar', action='store_true', help='Re-run tests on every bar')
    parser.add_argument('--name', help='Only suites whose class name contains this')
    parser.add_argument('--namespace', help='Only suites registered by modules starting with this')
    parser.add_argument('--tag', help='Only suites carrying one of these tags')
    parser.add_argument('--category', help='Only suites in this category')
    parser.add_argument('--timestamps', action='store_true', help='Prefix report lines with time')
    parser.add_argument('--strict', action='store_true', help='Report unexpected faults as Errored')
    parser.add_argument('--seed', type=int, default=42, help='Random seed for the bar feed')


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(description="Bar-driven test runner")
    parser.add_argument('--log-level', default='WARNING', help='Framework diagnostics level')
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    run_parser = subparsers.add_parser('run', help='Run suites against a simulated bar feed')
    add_selection_arguments(run_parser)
    run_parser.add_argument('--bars', type=int, help='Bars to generate (default: start bar + 1)')
    run_parser.add_argument('--volatility', type=float, default=0.02, help='Daily volatility of the feed')
    run_parser.add_argument('--price', type=float, default=100.0, help='Initial price of the feed')
    run_parser.add_argument('--output', help='Write the full report to this file')

    list_parser = subparsers.add_parser('list', help='List suites discovered at a given bar')
    add_selection_arguments(list_parser)
    list_parser.add_argument('--bars', type=int, default=51, help='Bars to load before discovery')

    config_parser = subparsers.add_parser('config', help='Show run configuration')
    config_parser.add_argument('--preset', default='default', choices=PRESETS, help='Preset to show')
    config_parser.add_argument('--file', help='Load and validate a JSON configuration file')
    config_parser.add_argument('--list', action='store_true', help='List presets')

    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    if args.command == 'run':
        return command_run(args)
    elif args.command == 'list':
        return command_list(args)
    elif args.command == 'config':
        return command_config(args)

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
