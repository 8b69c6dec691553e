#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import logging
from datetime import datetime
from pathlib import Path


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[1]


def _bootstrap_pythonpath() -> None:
    import sys

    src = _repo_root() / "src"
    if str(src) not in sys.path:
        sys.path.insert(0, str(src))


_bootstrap_pythonpath()

from content_forge.config import get_settings  # noqa: E402
from content_forge.providers.llm.gemini import GeminiGenerator  # noqa: E402
from content_forge.workflow.document import DocumentPipeline  # noqa: E402


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Render one document locally, without the quota gate.")
    parser.add_argument("--topic", required=True, help="Subject of the document.")
    parser.add_argument("--type", dest="doc_type", default="eBook", help="Kind of product, e.g. eBook or guide.")
    parser.add_argument("--tone", default="Professional", help="Writing tone used in every prompt.")
    parser.add_argument("--sections", type=int, default=5, help="Requested number of sections.")
    parser.add_argument("--fanout", action="store_true", help="Issue section calls concurrently.")
    parser.add_argument(
        "--output",
        default="",
        help="Markdown output path. Default: out/document_<timestamp>.md",
    )
    return parser.parse_args()


def write_document(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


async def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    args = parse_args()
    settings = get_settings()
    if args.fanout:
        settings = settings.model_copy(update={"section_fanout": True})

    pipeline = DocumentPipeline(GeminiGenerator(settings), settings)
    document = await pipeline.build_document(args.topic, args.doc_type, args.tone, args.sections)

    now = datetime.now().strftime("%Y%m%d_%H%M%S")
    output_path = Path(args.output) if args.output else Path(f"out/document_{now}.md")
    write_document(output_path, document)

    print(f"[render] chars={len(document)} sections_requested={args.sections}")
    print(f"[render] markdown={output_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
