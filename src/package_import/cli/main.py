"""Main CLI entry point."""

import argparse
import json
import logging
import sys
from pathlib import Path

from package_import.config import DEFAULT_CONFIG_PATH, ConfigError, ImportConfig, load_config


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="package-import",
        description="Import packages from a directory, LDIF dump or JSON export into the package store",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("-u", "--url", type=str, help="Directory URL, e.g. ldaps://ufds.example.com")
    source.add_argument("--ldif", type=Path, metavar="PATH", help="Read packages from an LDIF file")
    source.add_argument("--json", type=Path, metavar="PATH", help="Read packages from a JSON-lines file")

    parser.add_argument("-D", "--binddn", type=str, default=None, help="Bind DN (required with --url)")
    parser.add_argument("-w", "--password", type=str, default=None, help="Bind password (required with --url)")
    parser.add_argument(
        "-t",
        "--timeout",
        type=float,
        default=None,
        help="Directory connect/receive timeout in seconds",
    )
    parser.add_argument(
        "-f",
        "--config",
        type=Path,
        default=None,
        help=f"Config file (default: {DEFAULT_CONFIG_PATH} if present)",
    )
    parser.add_argument("-n", "--dry-run", action="store_true", help="Validate only; write nothing")
    parser.add_argument(
        "--overwrite",
        action="store_true",
        help="Update packages that already exist instead of skipping them",
    )
    parser.add_argument("--workers", type=int, default=None, help="Concurrent store writes (default: from config)")
    parser.add_argument(
        "--report",
        type=Path,
        default=None,
        help="Write every per-package outcome as JSON to this file",
    )
    parser.add_argument(
        "-d",
        "--debug",
        action="count",
        default=0,
        help="Debug logging; repeat for directory protocol tracing",
    )
    return parser


def _configure_logging(debug: int) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if debug > 1:
        from ldap3.utils.log import EXTENDED, set_library_log_detail_level

        set_library_log_detail_level(EXTENDED)
    else:
        logging.getLogger("ldap3").setLevel(logging.WARNING)
        logging.getLogger("httpx").setLevel(logging.WARNING)


def _build_loader(args: argparse.Namespace, cfg: ImportConfig):
    """Pick the one loader matching the configured source."""
    from package_import.loaders import LoaderRegistry

    if args.url:
        return LoaderRegistry.get(
            "ldap",
            url=args.url,
            bind_dn=args.binddn,
            password=args.password,
            timeout=args.timeout,
            directory=cfg.directory,
        )
    if args.ldif:
        return LoaderRegistry.get("ldif", path=args.ldif)
    return LoaderRegistry.get("json", path=args.json)


def _run_import(args: argparse.Namespace) -> int:
    """Run one import. Returns the process exit code."""
    from package_import.loaders import SourceError
    from package_import.pipeline import ReconcileOptions, reconcile
    from package_import.schema import load_schema
    from package_import.store import DryRunStore, StoreError, build_store

    try:
        cfg = load_config(args.config)
        schema = load_schema(cfg.schema_path)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    loader = _build_loader(args, cfg)
    options = ReconcileOptions(
        dry_run=args.dry_run,
        overwrite=args.overwrite,
        max_workers=args.workers or cfg.workers,
    )

    try:
        # A dry run must not create or touch the target
        store = DryRunStore() if args.dry_run else build_store(cfg.target)
    except StoreError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        summary = reconcile(loader.load(), store, schema, options)
    except SourceError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        store.close()

    prefix = "Dry run: " if args.dry_run else ""
    print(f"{prefix}{summary.to_text()}")

    if args.report:
        args.report.write_text(json.dumps(summary.to_dict(), indent=2, default=str), encoding="utf-8")
        print(f"Wrote {summary.total} outcomes to {args.report}")

    return 0 if summary.ok else 1


def main(argv: list[str] | None = None) -> None:
    """Parse args and run the import."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.url and (not args.binddn or not args.password):
        parser.error("--url requires --binddn and --password")
    if args.workers is not None and args.workers < 1:
        parser.error("--workers must be at least 1")
    _configure_logging(args.debug)
    raise SystemExit(_run_import(args))


if __name__ == "__main__":
    main()
