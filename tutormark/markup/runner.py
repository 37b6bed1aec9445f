import argparse
import json
import logging
import sys
from dataclasses import replace
from typing import Optional

from ..config import get_settings
from ..errors import MarkupError
from ..solution import format_solution, validate_solution
from .pipeline import MarkupPipeline
from .render import wrap_clusters

logger = logging.getLogger("tutormark")


def _read_input(path: Optional[str]) -> str:
    if not path or path == "-":
        return sys.stdin.read()
    with open(path, encoding="utf-8") as fh:
        return fh.read()


def _print_rendered(pipeline: MarkupPipeline, text: str, fmt: str, width: int) -> None:
    rendered = pipeline.render(text)
    if fmt == "json":
        print(json.dumps([b.model_dump(mode="json", by_alias=True, exclude_none=True) for b in rendered], ensure_ascii=False, indent=2))
        return
    for block in rendered:
        lines = wrap_clusters(block.clusters, width) or [""]
        if block.label:
            pad = " " * (len(block.label) + 1)
            print(f"{block.label} {lines[0]}")
            for line in lines[1:]:
                print(pad + line)
        else:
            for line in lines:
                print(line)


def _run_solution(pipeline: MarkupPipeline, raw: str, args: argparse.Namespace) -> int:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        print(f"Error: solution is not valid JSON: {e}", file=sys.stderr)
        return 1

    result = validate_solution(data if isinstance(data, dict) else None)
    for issue in result.issues:
        print(f"[{issue.code}] {issue.field}: {issue.message}", file=sys.stderr)
    if not result.is_valid:
        return 1

    solution = format_solution(data, decimals=pipeline.decimals)
    if args.format == "json":
        print(json.dumps(solution.model_dump(mode="json", by_alias=True), ensure_ascii=False, indent=2))
        return 0

    if solution.problem:
        _print_rendered(pipeline, solution.problem, "text", args.width)
    for idx, step in enumerate(solution.steps, start=1):
        print(f"\nStep {idx}: {step.title}")
        _print_rendered(pipeline, step.content, "text", args.width)
    if solution.final_answer:
        print("\nFinal answer:")
        _print_rendered(pipeline, solution.final_answer, "text", args.width)
    return 0


def main(argv: Optional[list] = None) -> int:
    parser = argparse.ArgumentParser(description="Normalize and lay out tutoring math markup")

    parser.add_argument("input", nargs="?", default="-", help="Input text file (default: stdin)")
    parser.add_argument("--format", "-f", choices=["text", "json"], default="text", help="Output format (default: text)")
    parser.add_argument("--width", "-w", type=int, default=60, help="Line width for text output (default: 60)")
    parser.add_argument("--decimals", action="store_true", help="Rewrite canonical decimals (0.25) as fractions")
    parser.add_argument("--solution", action="store_true", help="Treat input as a solution JSON document")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    args = parser.parse_args(argv)

    settings = get_settings()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    if args.decimals:
        settings = replace(settings, decimal_fractions=True)

    try:
        raw = _read_input(args.input)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        pipeline = MarkupPipeline(settings)
        if args.solution:
            return _run_solution(pipeline, raw, args)
        _print_rendered(pipeline, raw, args.format, args.width)
    except MarkupError as e:
        logger.error("Rendering failed: %s", e)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
