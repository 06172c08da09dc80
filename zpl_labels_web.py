"""HTTP API used by the label editor for previews and print jobs."""

from __future__ import annotations

import argparse
import logging
import os
from typing import Any, Mapping

from dotenv import load_dotenv
from flask import Flask, Response, jsonify, request

from label_layout import (
    FontFitter,
    MemoizedTextMetrics,
    TextMetrics,
    compile_layout,
    compile_template,
    fill_template,
    get_text_metrics,
)
from label_layout.serialization import (
    field_values_from_dict,
    fit_result_to_dict,
    layout_from_dict,
    parse_bool,
    parse_int,
    settings_from_dict,
)

__all__ = ["create_app", "create_app_from_env", "run_web_app"]

logger = logging.getLogger(__name__)

ZPL_MIMETYPE = "text/plain; charset=utf-8"


class ApiError(ValueError):
    """Raised for request payloads the API cannot use."""


def _payload() -> Mapping[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ApiError("Request body must be a JSON object.")
    return data


def _require(data: Mapping[str, Any], key: str) -> Any:
    value = data.get(key)
    if value is None:
        raise ApiError(f"Missing required key '{key}'.")
    return value


def create_app(metrics: TextMetrics | None = None) -> Flask:
    """Create the Flask app measuring text with ``metrics``."""

    app = Flask(__name__)
    base_metrics = metrics or get_text_metrics("average")

    def _fitter() -> FontFitter:
        # One cache per request: a preview measures the same strings repeatedly.
        return FontFitter(MemoizedTextMetrics(base_metrics))

    @app.errorhandler(ApiError)
    def api_error(exc: ApiError):  # pyright: ignore[reportUnusedFunction]
        return jsonify({"error": str(exc)}), 400

    def _zpl_response(text: str) -> Response:
        return Response(text, mimetype=ZPL_MIMETYPE)

    def _parse(func, value: Any, what: str):
        try:
            return func(value)
        except ValueError as exc:
            raise ApiError(f"Invalid {what}: {exc}") from exc

    @app.route("/health", methods=["GET"])
    def health():  # pyright: ignore[reportUnusedFunction]
        return jsonify({"status": "ok"})

    @app.route("/api/compile", methods=["POST"])
    def compile_endpoint() -> Response:  # pyright: ignore[reportUnusedFunction]
        data = _payload()
        layout = _parse(layout_from_dict, _require(data, "layout"), "layout")
        values = _parse(field_values_from_dict, data.get("values"), "values")
        settings = _parse(settings_from_dict, data.get("settings"), "settings")
        logger.info("Compiling layout '%s'", layout.name or layout.id or "unnamed")
        return _zpl_response(compile_layout(layout, values, settings, _fitter()))

    @app.route("/api/template", methods=["POST"])
    def template_endpoint() -> Response:  # pyright: ignore[reportUnusedFunction]
        data = _payload()
        layout = _parse(layout_from_dict, _require(data, "layout"), "layout")
        return _zpl_response(compile_template(layout, _fitter()))

    @app.route("/api/fill", methods=["POST"])
    def fill_endpoint() -> Response:  # pyright: ignore[reportUnusedFunction]
        data = _payload()
        template = _require(data, "template")
        if not isinstance(template, str):
            raise ApiError("'template' must be a string.")
        values = _parse(field_values_from_dict, data.get("values"), "values")
        settings = _parse(settings_from_dict, data.get("settings"), "settings")
        return _zpl_response(fill_template(template, values, settings))

    @app.route("/api/fit", methods=["POST"])
    def fit_endpoint():  # pyright: ignore[reportUnusedFunction]
        data = _payload()
        text = data.get("text") or ""
        if not isinstance(text, str):
            raise ApiError("'text' must be a string.")
        try:
            width = parse_int(data, "width")
            max_font_size = parse_int(data, "maxFontSize")
            min_font_size = parse_int(data, "minFontSize")
            allow_two_lines = parse_bool(data, "allowTwoLines", False)
            height = (
                parse_int(data, "height") if data.get("height") is not None else None
            )
        except ValueError as exc:
            raise ApiError(str(exc)) from exc
        result = _fitter().fit_optimal(
            text,
            width,
            max_font_size,
            min_font_size,
            allow_two_lines=allow_two_lines,
            box_height=height,
        )
        return jsonify(fit_result_to_dict(result))

    return app


def create_app_from_env() -> Flask:
    """Create the Flask app using ZPL_WEB_* environment variables."""
    load_dotenv()
    metrics = get_text_metrics(
        os.getenv("ZPL_WEB_METRICS", "average"),
        font_path=os.getenv("ZPL_WEB_FONT") or None,
    )
    return create_app(metrics)


def run_web_app(host: str, port: int) -> None:
    """Launch the API with the development server."""
    app = create_app_from_env()

    use_reloader_env = os.getenv("USE_RELOADER")
    use_reloader = (
        str(use_reloader_env).lower() in {"1", "true", "yes", "on"}
        if use_reloader_env is not None
        else False
    )
    app.run(host=host, port=port, debug=False, use_reloader=use_reloader)


def _log_level() -> int:
    level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), None)
    return level if isinstance(level, int) else logging.INFO


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for the web API."""
    parser = argparse.ArgumentParser(
        description="Label layout -> ZPL web API"
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host/IP for the API (default: 127.0.0.1).",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=4000,
        help="Port for the API (default: 4000).",
    )

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=_log_level(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    run_web_app(host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    load_dotenv()
    main()
