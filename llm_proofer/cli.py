"""Command-line interface for the LLM proofreader.

Sends a document to the model CLI, then applies the resulting corrections in
bulk or one by one.
"""

from __future__ import annotations

import argparse
import logging
import os
import shlex
import subprocess
import sys
from pathlib import Path

from .config import ProofreaderConfiguration
from .llm.errors import LLMProofreaderError
from .llm.process_runner import get_default_runner
from .review.applier import apply_to_file, review_file
from .review.console_review import ConsoleReviewer
from .review.persistence import CorrectionStore

logger = logging.getLogger(__name__)

STDIN_SOURCE = "-"


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="llm-proofer",
        description="Proofread documents with a language-model CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Ask the model for corrections to a whole document
  llm-proofer send chapter1.txt

  # Only lines 10 to 40
  llm-proofer send chapter1.txt --start-line 10 --end-line 40

  # Apply everything in replacements.json next to the document
  llm-proofer apply chapter1.txt

  # Confirm each correction individually
  llm-proofer review chapter1.txt

  # Edit the pending corrections by hand
  llm-proofer open chapter1.txt

Environment Variables:
  LLM_PROOFER_COMMAND          Model CLI executable (default: claude)
  LLM_PROOFER_MODEL            Model identifier (default: sonnet)
  LLM_PROOFER_OUTPUT_FILENAME  Side file name (default: replacements.json)
  LLM_PROOFER_PROMPT_TEMPLATE  Path to a Mustache prompt template with {{{text}}}
  LLM_PROOFER_DEFAULT_DIR      Side file directory for text read from stdin
        """,
    )

    parser.add_argument("--command", help="Model CLI executable")
    parser.add_argument("--model", help="Model identifier passed to the CLI")
    parser.add_argument("--output-filename", help="Side file name")
    parser.add_argument(
        "--prompt-template", type=Path, help="Path to a prompt template file"
    )
    parser.add_argument("--dotenv", type=Path, help="Path to .env file")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )

    subparsers = parser.add_subparsers(dest="action", required=True)

    send = subparsers.add_parser("send", help="Send a document to the model")
    send.add_argument("document", help="Document path, or - to read stdin")
    send.add_argument("--start-line", type=int, help="First line to send (1-based)")
    send.add_argument("--end-line", type=int, help="Last line to send (inclusive)")

    for name, help_text in (
        ("apply", "Apply all corrections from the side file"),
        ("review", "Confirm each correction before applying it"),
        ("open", "Open the side file in $VISUAL / $EDITOR"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("document", type=Path, help="Document path")

    return parser.parse_args(args)


def build_config(args: argparse.Namespace) -> ProofreaderConfiguration:
    """Environment defaults overridden by command-line flags."""
    from dotenv import load_dotenv

    if args.dotenv:
        load_dotenv(dotenv_path=str(args.dotenv), override=True)
    else:
        load_dotenv()

    return ProofreaderConfiguration.from_env().with_overrides(
        command=args.command,
        model=args.model,
        output_filename=args.output_filename,
        prompt_template=args.prompt_template,
    )


def select_lines(text: str, start_line: int | None, end_line: int | None) -> str:
    """Return lines ``start_line`` to ``end_line`` (1-based, inclusive)."""
    if start_line is None and end_line is None:
        return text
    lines = text.splitlines(keepends=True)
    first = 1 if start_line is None else start_line
    last = len(lines) if end_line is None else end_line
    if first < 1 or last < first or first > len(lines):
        raise ValueError(
            f"Invalid line range {first}-{last} for a document of {len(lines)} lines"
        )
    return "".join(lines[first - 1 : last])


def run_send(args: argparse.Namespace, config: ProofreaderConfiguration) -> int:
    if args.document == STDIN_SOURCE:
        source = None
        text = sys.stdin.read()
    else:
        source = Path(args.document)
        # Keep line endings so "old" strings match the file at apply time.
        with open(source, "r", encoding="utf-8", newline="") as f:
            text = f.read()
    text = select_lines(text, args.start_line, args.end_line)

    runner = get_default_runner(config)
    handle = runner.send(text, source)
    print(f"Sent {len(text)} characters to {config.command} ({config.model})...")

    try:
        outcome = handle.wait()
    except KeyboardInterrupt:
        handle.cancel()
        handle.wait()
        print("\nCancelled", file=sys.stderr)
        return 130

    if not outcome.ok:
        print(f"Error: {outcome.error}", file=sys.stderr)
        return 1

    corrections = CorrectionStore().read(outcome.output_path)
    if corrections:
        print(f"{len(corrections)} correction(s) saved to {outcome.output_path}")
    else:
        print(f"No corrections needed ({outcome.output_path})")
    return 0


def run_apply(args: argparse.Namespace, config: ProofreaderConfiguration) -> int:
    result = apply_to_file(args.document, config)
    if result.total == 0:
        print("No corrections.")
    else:
        print(result.summary())
    return 0


def run_review(args: argparse.Namespace, config: ProofreaderConfiguration) -> int:
    reviewer = ConsoleReviewer()
    result = review_file(args.document, config, reviewer.decide, reviewer.highlight)
    if result.total == 0:
        print("No corrections.")
    else:
        print(result.summary())
    return 0


def run_open(args: argparse.Namespace, config: ProofreaderConfiguration) -> int:
    path = config.get_output_path(args.document)
    if not path.exists():
        print(f"Error: No corrections file found at {path}", file=sys.stderr)
        return 1
    editor = os.environ.get("VISUAL") or os.environ.get("EDITOR") or "vi"
    return subprocess.call([*shlex.split(editor), str(path)])


ACTIONS = {
    "send": run_send,
    "apply": run_apply,
    "review": run_review,
    "open": run_open,
}


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Command-line arguments (None = use sys.argv)

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = build_config(args)
        return ACTIONS[args.action](args, config)
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 130
    except (LLMProofreaderError, OSError, ValueError) as e:
        logger.debug("Command %s failed", args.action, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
