#!/usr/bin/env python3
"""Print signed ordering links for table QR codes.

Each link carries the table code and its HMAC token so orders placed from it
are tagged with the table. Output is CSV by default, or JSON / plain text.

Usage::

    python scripts/table_qr_links.py --count 20 --secret s3cret
    python scripts/table_qr_links.py --tables M01,BAR-2 --format json
"""

from __future__ import annotations

import argparse
import csv
import json
import os
import sys
from pathlib import Path
from typing import TextIO

# Ensure ``bar_api`` package is importable when running as a standalone script
BASE_DIR = Path(__file__).resolve().parents[1]
sys.path.append(str(BASE_DIR))

from bar_api.app.table_auth import (  # noqa: E402
    build_table_link,
    normalize_table_code,
    sign_table_code,
)

MAX_TABLES = 300


def parse_tables(raw: str) -> list[str]:
    """Split a comma separated list, dropping invalid codes."""
    codes = (normalize_table_code(part) for part in raw.split(","))
    return [code for code in codes if code]


def tables_from_count(count: int) -> list[str]:
    """Return ``M01``..``Mnn`` for ``count`` clamped to 1..300."""
    safe = max(1, min(MAX_TABLES, count))
    return [f"M{i:02d}" for i in range(1, safe + 1)]


def build_rows(tables: list[str], base_url: str, secret: str) -> list[dict]:
    return [
        {
            "table_code": code,
            "token": sign_table_code(code, secret),
            "url": build_table_link(base_url, code, secret),
        }
        for code in tables
    ]


def write_rows(rows: list[dict], fmt: str, out: TextIO) -> None:
    if fmt == "json":
        out.write(json.dumps(rows, indent=2) + "\n")
    elif fmt == "plain":
        for row in rows:
            out.write(f"{row['table_code']} {row['url']}\n")
    else:
        writer = csv.writer(out, lineterminator="\n")
        writer.writerow(["table_code", "url"])
        for row in rows:
            writer.writerow([row["table_code"], row["url"]])


def main(argv: list[str] | None = None, out: TextIO | None = None) -> int:
    parser = argparse.ArgumentParser(description="Generate signed table QR links")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--tables", help="Comma separated table codes, e.g. M01,M02")
    group.add_argument("--count", type=int, help="Generate M01..Mnn")
    parser.add_argument(
        "--secret",
        default=os.getenv("TABLE_QR_SIGNING_SECRET", ""),
        help="HMAC secret (defaults to TABLE_QR_SIGNING_SECRET)",
    )
    parser.add_argument(
        "--base-url",
        default=os.getenv("PUBLIC_BASE_URL", "http://localhost:8000"),
        help="Public ordering page base URL",
    )
    parser.add_argument(
        "--format", choices=["csv", "json", "plain"], default="csv"
    )
    args = parser.parse_args(argv)
    out = out or sys.stdout

    if args.tables:
        tables = parse_tables(args.tables)
    elif args.count is not None:
        tables = tables_from_count(args.count)
    else:
        tables = []
    if not tables:
        print("usage: --tables M01,M02 or --count 20", file=sys.stderr)
        return 1

    secret = (args.secret or "").strip()
    if not secret:
        print("set TABLE_QR_SIGNING_SECRET or pass --secret", file=sys.stderr)
        return 1

    write_rows(build_rows(tables, args.base_url, secret), args.format, out)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
