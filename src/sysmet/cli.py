"""CLI interface for sysmet."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime, timedelta, timezone

from . import __version__
from .config import SysmetConfig, load_config
from .errors import SysmetError

logger = logging.getLogger(__name__)


def _cmd_update(args: argparse.Namespace, cfg: SysmetConfig) -> None:
    """Take snapshots and persist them in one lock/load/write cycle."""
    from .collector.manager import SnapshotCollector
    from .store.database import MetricsStore

    database = args.database or cfg.store.database
    ignored = args.ignored_networks if args.ignored_networks is not None else cfg.update.ignored_networks
    cleanup_older = args.cleanup_older if args.cleanup_older is not None else cfg.update.cleanup_older_days
    times = args.times if args.times is not None else cfg.update.times

    store, handle = MetricsStore.from_file_with_write(
        database,
        timeout=cfg.store.lock_timeout_seconds,
        poll_interval=cfg.store.lock_poll_interval_seconds,
    )
    try:
        collector = SnapshotCollector(ignored)
        for _ in range(times):
            store.take_snapshot(collector=collector)
        if cleanup_older is not None:
            removed = store.remove_older_than(cleanup_older)
            logger.info("Removed %d snapshots older than %d days", removed, cleanup_older)
    except BaseException:
        store.close_without_writing(handle)
        raise

    if args.dry_run:
        store.close_without_writing(handle)
        print(f"Dry run: {len(store.snapshots)} snapshots not written to {database}")
        return
    store.write_and_close(handle)
    logger.info("Wrote %d snapshots to %s", len(store.snapshots), database)


def _cmd_series(args: argparse.Namespace, cfg: SysmetConfig) -> None:
    """Load the store read-only and show its derived series."""
    from .analyzer.charts import derive_series, print_series, save_series
    from .store.database import MetricsStore

    database = args.database or cfg.store.database
    store = MetricsStore.from_file(
        database,
        timeout=cfg.store.lock_timeout_seconds,
        poll_interval=cfg.store.lock_poll_interval_seconds,
    )
    if not store.snapshots:
        print(f"No snapshots found in {database}")
        return

    groups = derive_series(store)
    print(f"Loaded {len(store.snapshots)} snapshots (store version {store.version})\n")
    if args.output:
        save_series(groups, args.output)
        print(f"Series saved to {args.output}")
    if not args.no_table:
        print_series(groups)


def _cmd_check(args: argparse.Namespace, cfg: SysmetConfig) -> None:
    """Compare a fresh reading to the thresholds and print a report."""
    from .analyzer.thresholds import evaluate, format_report, is_after_cooldown, record_sent, take_percent_snapshot

    thresholds_cfg = cfg.thresholds
    thresholds = thresholds_cfg.to_thresholds()
    for name in ("cpu", "ram", "swap", "memory", "disk", "avg_load"):
        value = getattr(args, f"{name}_threshold")
        if value is not None:
            setattr(thresholds, name, value)

    now = datetime.now(timezone.utc)
    cooldown = timedelta(seconds=thresholds_cfg.cooldown_seconds)
    if not args.dry_run and not is_after_cooldown(thresholds_cfg.last_sent_path, cooldown, now):
        logger.info("No need to check usages, we are before the end of the cooldown")
        return

    snapshot = take_percent_snapshot(thresholds_cfg.disk_path)
    crossed = evaluate(snapshot, thresholds)
    if not crossed:
        logger.info("Finishing early because no threshold has been crossed")
        return

    logger.info("At least one threshold crossed!")
    print(format_report(snapshot, crossed))
    if not args.dry_run:
        record_sent(thresholds_cfg.last_sent_path, now)


def _cmd_version(_args: argparse.Namespace, _cfg: SysmetConfig) -> None:
    print(f"sysmet {__version__}")


def _percentage(value: str) -> float:
    number = float(value)
    if not 0 <= number <= 100:
        raise argparse.ArgumentTypeError(f"{value} is not between 0 and 100")
    return number


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"{value} must be zero or more")
    return number


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"{value} must be at least 1")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sysmet",
        description="Record host resource metrics and check usage thresholds",
    )
    parser.add_argument("--config", "-c", default=None, help="Path to sysmet.yaml")
    parser.add_argument("--verbose", "-v", action="count", default=0, help="Increase log verbosity")
    sub = parser.add_subparsers(dest="command")

    # update
    update_p = sub.add_parser("update", help="Append a snapshot to the database")
    update_p.add_argument("--database", "--db", default=None, metavar="FILE", help="Database file")
    update_p.add_argument("--cleanup-older", "--gc", type=_non_negative_int, default=None, metavar="DAYS",
                          help="Drop snapshots older than DAYS")
    update_p.add_argument("--ignored-networks", "-i", nargs="*", default=None, metavar="NAME",
                          help="Network interfaces to leave out")
    update_p.add_argument("--times", type=_positive_int, default=None, help=argparse.SUPPRESS)
    update_p.add_argument("--dry-run", action="store_true", help="Collect but do not write")
    update_p.set_defaults(func=_cmd_update)

    # series
    series_p = sub.add_parser("series", help="Show the derived chart series")
    series_p.add_argument("--database", "--db", default=None, metavar="FILE", help="Database file")
    series_p.add_argument("--output", "-o", default=None, help="Write the series as JSON")
    series_p.add_argument("--no-table", action="store_true", help="Skip rich table output")
    series_p.set_defaults(func=_cmd_series)

    # check
    check_p = sub.add_parser("check", help="Check usage thresholds on a fresh reading")
    for name, label in (
        ("cpu", "CPU"),
        ("ram", "RAM"),
        ("swap", "Swap"),
        ("memory", "Memory (RAM & Swap)"),
        ("disk", "Disk"),
        ("avg-load", "Average Load"),
    ):
        check_p.add_argument(f"--{name}-threshold", type=_percentage, default=None,
                             metavar="PERCENTAGE", help=f"Max {label} usage before warning")
    check_p.add_argument("--dry-run", action="store_true", help="Ignore and do not record the cooldown")
    check_p.set_defaults(func=_cmd_check)

    # version
    ver_p = sub.add_parser("version", help="Print version")
    ver_p.set_defaults(func=_cmd_version)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Entry point for the sysmet CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    cfg = load_config(args.config)
    level = logging.DEBUG if args.verbose >= 2 else logging.INFO if args.verbose == 1 else cfg.log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    try:
        args.func(args, cfg)
    except SysmetError as exc:
        logger.error("%s", exc)
        print(f"error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
