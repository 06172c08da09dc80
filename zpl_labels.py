#!/usr/bin/env python3
"""Compile label layouts to ZPL, build templates and fill them from the shell."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

from dotenv import load_dotenv

from label_layout import (
    FontFitter,
    PrintSettings,
    compile_layout,
    compile_template,
    fill_template,
    get_text_metrics,
    list_text_metrics,
)
from label_layout.config import DEFAULT_COPIES, DEFAULT_DARKNESS, DEFAULT_PRINT_SPEED
from label_layout.serialization import (
    field_values_from_dict,
    fit_result_to_dict,
    layout_from_dict,
)

logger = logging.getLogger("zpl_labels")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise SystemExit(f"Environment variable {name} must be an integer, got '{raw}'.") from None


def _read_json(path: str, what: str) -> Any:
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as exc:
        raise SystemExit(f"Cannot read {what} '{path}': {exc}") from exc
    except json.JSONDecodeError as exc:
        raise SystemExit(f"Invalid JSON in {what} '{path}': {exc}") from exc


def _load_layout(path: str):
    try:
        return layout_from_dict(_read_json(path, "layout"))
    except ValueError as exc:
        raise SystemExit(f"Invalid layout '{path}': {exc}") from exc


def _load_values(path: Optional[str]) -> dict[str, str]:
    if not path:
        return {}
    try:
        return field_values_from_dict(_read_json(path, "field values"))
    except ValueError as exc:
        raise SystemExit(f"Invalid field values '{path}': {exc}") from exc


def _build_fitter(args: argparse.Namespace) -> FontFitter:
    try:
        metrics = get_text_metrics(args.metrics, font_path=args.font)
    except (ValueError, FileNotFoundError) as exc:
        raise SystemExit(str(exc)) from exc
    return FontFitter(metrics)


def _settings(args: argparse.Namespace) -> PrintSettings:
    """Command-line values, else ZPL_* environment defaults, else built-ins."""

    def pick(value: Optional[int], env_name: str, default: int) -> int:
        return value if value is not None else _env_int(env_name, default)

    return PrintSettings(
        copies=pick(args.copies, "ZPL_COPIES", DEFAULT_COPIES),
        speed=pick(args.speed, "ZPL_PRINT_SPEED", DEFAULT_PRINT_SPEED),
        darkness=pick(args.darkness, "ZPL_PRINT_DARKNESS", DEFAULT_DARKNESS),
    )


def _write_output(text: str, output: Optional[str]) -> str:
    if not output:
        return text
    Path(output).write_text(text + "\n", encoding="utf-8")
    return f"Wrote {output}"


def _add_metrics_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--metrics",
        choices=list(list_text_metrics()),
        default=os.getenv("ZPL_METRICS", "average"),
        help="Text measurement backend (default: average, or ZPL_METRICS).",
    )
    parser.add_argument(
        "--font",
        default=os.getenv("ZPL_FONT_PATH"),
        help="TrueType font file measured by the reportlab backend.",
    )


def _add_settings_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--copies",
        type=int,
        default=None,
        help="Print quantity (defaults to ZPL_COPIES or 1).",
    )
    parser.add_argument(
        "--speed",
        type=int,
        default=None,
        help="Print speed (defaults to ZPL_PRINT_SPEED or 4).",
    )
    parser.add_argument(
        "--darkness",
        type=int,
        default=None,
        help="Media darkness (defaults to ZPL_PRINT_DARKNESS or 10).",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Label layout -> ZPL compiler"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging (overrides LOG_LEVEL).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    compile_cmd = sub.add_parser("compile", help="Compile a layout with field values.")
    compile_cmd.add_argument("layout", help="Layout JSON document.")
    compile_cmd.add_argument("values", nargs="?", help="Field values JSON object.")
    compile_cmd.add_argument("-o", "--output")
    _add_settings_arguments(compile_cmd)
    _add_metrics_arguments(compile_cmd)

    template_cmd = sub.add_parser("template", help="Compile a layout into a ZPL template.")
    template_cmd.add_argument("layout", help="Layout JSON document.")
    template_cmd.add_argument("-o", "--output")
    _add_metrics_arguments(template_cmd)

    fill_cmd = sub.add_parser("fill", help="Fill a ZPL template with field values.")
    fill_cmd.add_argument("template", help="ZPL template file.")
    fill_cmd.add_argument("values", nargs="?", help="Field values JSON object.")
    fill_cmd.add_argument("-o", "--output")
    _add_settings_arguments(fill_cmd)

    fit_cmd = sub.add_parser("fit", help="Report the font size chosen for a text box.")
    fit_cmd.add_argument("text")
    fit_cmd.add_argument("--width", type=int, required=True, help="Box width in dots.")
    fit_cmd.add_argument("--height", type=int, help="Box height in dots.")
    fit_cmd.add_argument("--max-font", type=int, default=30)
    fit_cmd.add_argument("--min-font", type=int, default=12)
    fit_cmd.add_argument(
        "--two-lines",
        action="store_true",
        help="Allow splitting the text across two lines.",
    )
    _add_metrics_arguments(fit_cmd)

    return parser


def _configure_logging(verbose: bool) -> None:
    level_name = "DEBUG" if verbose else os.getenv("LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.WARNING), format=LOG_FORMAT)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point for the ZPL compiler."""

    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if args.command == "compile":
        layout = _load_layout(args.layout)
        zpl = compile_layout(
            layout,
            _load_values(args.values),
            _settings(args),
            _build_fitter(args),
        )
        logger.info("Compiled layout '%s' (%d fields)", layout.name or args.layout, len(layout.fields))
        print(_write_output(zpl, args.output))
    elif args.command == "template":
        layout = _load_layout(args.layout)
        print(_write_output(compile_template(layout, _build_fitter(args)), args.output))
    elif args.command == "fill":
        try:
            template = Path(args.template).read_text(encoding="utf-8")
        except OSError as exc:
            raise SystemExit(f"Cannot read template '{args.template}': {exc}") from exc
        zpl = fill_template(template.rstrip("\n"), _load_values(args.values), _settings(args))
        print(_write_output(zpl, args.output))
    else:
        result = _build_fitter(args).fit_optimal(
            args.text,
            args.width,
            args.max_font,
            args.min_font,
            allow_two_lines=args.two_lines,
            box_height=args.height,
        )
        print(json.dumps(fit_result_to_dict(result), ensure_ascii=False))
    return 0


def run() -> None:
    """Console script entry point; reads .env before parsing arguments."""

    load_dotenv()
    sys.exit(main())


if __name__ == "__main__":
    run()
