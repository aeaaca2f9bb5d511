"""Command-line interface for unindent."""

from __future__ import annotations

import argparse
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from unindent.errors import CheckSyntaxError, Severity
from unindent.text import Transform, TransformedText


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    input_file: Path | None
    output_file: Path | None
    mode: Transform
    args: list[str] | None
    check: bool
    debug: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="unindent",
        description="Strip common indentation from block text, optionally folding lines",
    )
    p.add_argument("input", nargs="?", default="-", help="Input file (default: stdin)")
    p.add_argument("-o", "--output", help="Output file (default: stdout)")
    mode = p.add_mutually_exclusive_group()
    mode.add_argument(
        "-m",
        "--mode",
        choices=[t.value for t in Transform],
        default=None,
        help="Transformation to apply (default: unindent)",
    )
    mode.add_argument(
        "-f",
        "--fold",
        dest="mode",
        action="store_const",
        const=Transform.FOLD.value,
        help="Shorthand for --mode fold",
    )
    p.add_argument(
        "-a",
        "--arg",
        action="append",
        default=[],
        metavar="VALUE",
        help="Positional format argument; the result is used as a template (repeatable)",
    )
    p.add_argument(
        "--config",
        metavar="FILE",
        help="Config file (default: auto-discover unindent.toml)",
    )
    p.add_argument(
        "--check",
        action="store_true",
        help="Check a Python source for misused block text constructors",
    )
    p.add_argument("--debug", action="store_true", help="Dump line layout to stderr")
    return p


def parse_mode(s: str) -> Transform:
    """Parse a transformation name."""
    try:
        return Transform(s)
    except ValueError:
        choices = ", ".join(t.value for t in Transform)
        raise argparse.ArgumentTypeError(
            f"invalid mode '{s}' (expected one of: {choices})"
        ) from None


def load_config(config_path: Path | None, input_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else input_dir / "unindent.toml"

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        return tomllib.load(f)


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: config file < CLI flags.
    """
    input_file = None if args.input == "-" else Path(args.input)
    input_dir = input_file.parent if input_file is not None else Path(".")
    if not input_dir.parts:
        input_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    config = load_config(config_path, input_dir)

    # Mode: config < CLI
    mode = Transform.UNINDENT
    cfg_mode = config.get("mode")
    if isinstance(cfg_mode, str):
        mode = parse_mode(cfg_mode)
    if args.mode is not None:
        mode = parse_mode(args.mode)

    # Format args: CLI replaces config
    fmt_args: list[str] | None = None
    cfg_args = config.get("args")
    if isinstance(cfg_args, list):
        fmt_args = [str(a) for a in cfg_args]
    if args.arg:
        fmt_args = list(args.arg)

    output_file = Path(args.output) if args.output else None

    return CliOptions(
        input_file=input_file,
        output_file=output_file,
        mode=mode,
        args=fmt_args,
        check=args.check,
        debug=args.debug,
    )


def read_input(options: CliOptions) -> str:
    if options.input_file is None:
        return sys.stdin.read()
    return options.input_file.read_text(encoding="utf-8")


def transform_file(options: CliOptions) -> str:
    """Read the input, transform it, and apply format arguments if any."""
    from unindent.debug import dump_layout

    source = read_input(options)
    if options.debug:
        dump_layout(source, file=sys.stderr)

    text = TransformedText(source, options.mode)
    if options.args is not None:
        return text.format(*options.args)
    return text.value


def check_file(options: CliOptions) -> int:
    """Run the static checker over the input and print findings.

    Returns 1 if the source does not parse or has error findings, else 0.
    """
    from unindent.check import check_source

    source = read_input(options)
    filename = str(options.input_file) if options.input_file is not None else "<stdin>"

    try:
        problems = check_source(source, filename)
    except CheckSyntaxError as exc:
        print(exc.format(filename), file=sys.stderr)
        return 1

    for problem in problems:
        print(problem.format(filename), file=sys.stderr)
    return 1 if any(p.severity is Severity.ERROR for p in problems) else 0


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = resolve_options(args)
    except (argparse.ArgumentTypeError, tomllib.TOMLDecodeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    try:
        if options.check:
            return check_file(options)
        text = transform_file(options)
    except (OSError, UnicodeDecodeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except (IndexError, KeyError, ValueError) as exc:
        print(f"error: format failed: {exc}", file=sys.stderr)
        return 2

    out = text + "\n" if text else ""
    if options.output_file:
        options.output_file.write_text(out, encoding="utf-8")
    else:
        sys.stdout.write(out)

    return 0
