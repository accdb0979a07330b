#!/usr/bin/env python3
"""Embed every file in a document folder and write the retrieval corpus."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
PACKAGE_PATHS = [ROOT / "packages" / "relay_shared", ROOT / "services" / "api"]
for path in PACKAGE_PATHS:
    if str(path) not in sys.path:
        sys.path.append(str(path))

from openai import OpenAI, OpenAIError  # noqa: E402

from relay_shared import configure_logging  # noqa: E402
from relay_shared.config import get_settings  # noqa: E402
from app.infra.corpus_builder import build_records, write_corpus  # noqa: E402

logger = logging.getLogger("build-corpus")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build vectors.json from a folder of documents.")
    parser.add_argument("--docs-dir", type=Path, default=Path("docs"), help="Folder of documents (default: docs).")
    parser.add_argument("--output", type=Path, default=None, help="Corpus file to write (default: CORPUS_PATH).")
    parser.add_argument("--delay", type=float, default=0.2, help="Seconds to wait between embedding calls.")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    configure_logging("build-corpus")
    settings = get_settings()

    if not settings.openai_api_key:
        logger.error("OPENAI_API_KEY not set. See .env.example.")
        return 1

    client = OpenAI(api_key=settings.openai_api_key, base_url=settings.openai_base_url)
    output = args.output or Path(settings.corpus_path)
    try:
        records = build_records(client, args.docs_dir, settings=settings, delay_seconds=args.delay)
        write_corpus(records, output)
    except (OSError, OpenAIError, ValueError):
        logger.exception("corpus build failed")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
