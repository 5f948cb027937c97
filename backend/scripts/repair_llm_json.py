"""
Repair a raw LLM response into parseable JSON.

Usage:
    python backend/scripts/repair_llm_json.py response.txt --steps
    cat response.txt | python backend/scripts/repair_llm_json.py -
"""

import argparse
import json
import sys
from pathlib import Path

from llm_sanitizer.core.config import get_settings
from llm_sanitizer.core.errors import JsonSanitizationError
from llm_sanitizer.core.json_utils import sanitize_llm_json
from llm_sanitizer.core.logging import setup_logging


def run(source: str, show_steps: bool = False, indent: int = 2) -> int:
    text = sys.stdin.read() if source == "-" else Path(source).read_text(encoding="utf-8")
    try:
        result = sanitize_llm_json(text)
    except JsonSanitizationError as exc:
        print(f"error={exc.code}", file=sys.stderr)
        return 1

    if show_steps:
        for step in result.applied_steps:
            print(f"step={step.name} iterations={step.iterations} {step.description}", file=sys.stderr)
        for name in result.transforms:
            print(f"transform={name}", file=sys.stderr)

    if not result.final_parse_succeeded:
        print(f"error=unparseable_after_repair detail={result.parse_error}", file=sys.stderr)
        print(result.content)
        return 1
    print(json.dumps(result.data, indent=indent or None, ensure_ascii=False))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("source", help="file to repair, or - for stdin")
    parser.add_argument("--steps", action="store_true", help="print applied steps to stderr")
    parser.add_argument("--indent", type=int, default=2)
    args = parser.parse_args(argv)
    settings = get_settings()
    setup_logging(debug=settings.debug, json_output=settings.log_json, level=settings.log_level)
    return run(args.source, show_steps=args.steps, indent=max(0, args.indent))


if __name__ == "__main__":
    sys.exit(main())
