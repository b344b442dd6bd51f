#!/usr/bin/env python3
"""
Alembic migration helper.

Usage:
  python migrate.py                    upgrade to head
  python migrate.py downgrade -1       revert one step
  python migrate.py current            show the current revision
  python migrate.py history            list revisions
  python migrate.py stamp head         mark an existing database as migrated
"""
import argparse
import sys
from pathlib import Path

from alembic import command
from alembic.config import Config as AlembicConfig

PROJECT_ROOT = Path(__file__).resolve().parent


def build_alembic_config(project_root: Path) -> AlembicConfig:
    alembic_ini_path = project_root / "alembic.ini"
    if not alembic_ini_path.exists():
        raise FileNotFoundError(f"alembic.ini not found at {alembic_ini_path}")

    cfg = AlembicConfig(str(alembic_ini_path))
    # Absolute script location so the helper works from any CWD
    cfg.set_main_option("script_location", str(project_root / "alembic"))
    return cfg


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Netwatch Manager database migrations")
    subparsers = parser.add_subparsers(dest="cmd", required=False)

    p_upgrade = subparsers.add_parser("upgrade", help="Upgrade to a later revision")
    p_upgrade.add_argument("revision", nargs="?", default="head")

    p_downgrade = subparsers.add_parser("downgrade", help="Revert to a previous revision")
    p_downgrade.add_argument("revision", help="Target revision (e.g. -1, base)")

    subparsers.add_parser("current", help="Show the current revision")
    subparsers.add_parser("history", help="List revisions")

    p_stamp = subparsers.add_parser("stamp", help="Stamp the revision table without migrating")
    p_stamp.add_argument("revision")

    parser.set_defaults(cmd="upgrade", revision="head")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    argv = argv if argv is not None else sys.argv[1:]
    cfg = build_alembic_config(PROJECT_ROOT)
    args = parse_args(argv)

    try:
        if args.cmd == "upgrade":
            command.upgrade(cfg, args.revision)
        elif args.cmd == "downgrade":
            command.downgrade(cfg, args.revision)
        elif args.cmd == "current":
            command.current(cfg)
        elif args.cmd == "history":
            command.history(cfg)
        elif args.cmd == "stamp":
            command.stamp(cfg, args.revision)
        else:
            raise ValueError(f"Unknown command: {args.cmd}")
    except Exception as exc:  # noqa: BLE001
        sys.stderr.write(f"Migration command failed: {exc}\n")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
