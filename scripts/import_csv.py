from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from skillcheck.infrastructure.config import DatabaseConfig, get_settings
from skillcheck.infrastructure.db import create_database_engine
from skillcheck.infrastructure.exceptions import SkillCheckError
from skillcheck.utils.seed import seed_database_from_csv


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    defaults = get_settings().database
    parser = argparse.ArgumentParser(description="Import a skill-check CSV export")
    parser.add_argument("csv_path", type=Path)
    parser.add_argument("--backend", choices=["sqlite", "mysql"], default=defaults.backend)
    parser.add_argument("--sqlite-path", default=defaults.sqlite_path)
    parser.add_argument("--mysql-host", default=defaults.mysql_host)
    parser.add_argument("--mysql-port", type=int, default=defaults.mysql_port)
    parser.add_argument("--mysql-user", default=defaults.mysql_user)
    parser.add_argument("--mysql-password", default=defaults.mysql_password)
    parser.add_argument(
        "--mysql-database", "--mysql-db", dest="mysql_database", default=defaults.mysql_database
    )
    parser.add_argument(
        "--strict", action="store_true", help="Import nothing if any row is rejected"
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    if not args.csv_path.exists():
        print(f"ERROR: CSV file not found at {args.csv_path}", file=sys.stderr)
        return 1

    cfg = DatabaseConfig(
        backend=args.backend,
        sqlite_path=args.sqlite_path,
        mysql_host=args.mysql_host,
        mysql_port=args.mysql_port,
        mysql_user=args.mysql_user,
        mysql_password=args.mysql_password,
        mysql_database=args.mysql_database,
    )
    try:
        summary = seed_database_from_csv(
            create_database_engine(cfg), args.csv_path, strict=args.strict
        )
    except SkillCheckError as exc:
        print(f"ERROR: {exc.user_message}", file=sys.stderr)
        for error in exc.details.get("errors", []):
            print(f"  {error['field']}: {error['message']}", file=sys.stderr)
        return 1

    print(json.dumps(summary.to_dict(), indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
