#!/usr/bin/env python3
"""
seed_experts.py: thin CLI wrapper for expertbook.seed.seed_experts.

Creates the tables if needed and inserts the reference experts that are
not present yet. Safe to run repeatedly.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys
from typing import List, Optional

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

logger = logging.getLogger("seed_experts")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Seed reference experts.")
    parser.add_argument(
        "--database-url",
        dest="database_url",
        help="SQLAlchemy URL to seed instead of EXPERTBOOK_DATABASE_URL.",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    args = build_parser().parse_args(argv)

    from sqlalchemy.orm import sessionmaker

    from expertbook.core.config import settings
    from expertbook.database import build_engine, init_db
    from expertbook.seed import seed_experts

    engine = build_engine(args.database_url or settings.database_url)
    init_db(bind=engine)
    session = sessionmaker(bind=engine)()
    try:
        created = seed_experts(session)
    finally:
        session.close()
    logger.info("Created %d expert(s)", created)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
