import logging
import os
import unittest
from unittest.mock import Mock, patch

from flask import Flask
from flask.testing import FlaskClient
from werkzeug.wrappers import Response

from label_layout import PrintSettings, compile_layout, compile_template
from label_layout.serialization import layout_from_dict
import zpl_labels_web
from zpl_labels_web import create_app

LAYOUT = {
    "widthDots": 406,
    "heightDots": 203,
    "dpi": 203,
    "fields": [
        {
            "id": "title",
            "fieldKey": "title",
            "x": 8,
            "y": 8,
            "width": 260,
            "height": 40,
            "maxFontSize": 28,
            "minFontSize": 14,
        },
        {
            "id": "price",
            "fieldKey": "price",
            "x": 8,
            "y": 60,
            "width": 120,
            "height": 30,
            "alignment": "right",
            "maxFontSize": 24,
            "minFontSize": 12,
        },
    ],
}


class WebApiTests(unittest.TestCase):
    def setUp(self) -> None:
        self.app: Flask = create_app()
        self.app.config["TESTING"] = True
        self.client: FlaskClient = self.app.test_client()

    def test_health(self) -> None:
        response: Response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json(), {"status": "ok"})

    def test_compile_returns_zpl(self) -> None:
        values = {"title": "Charizard", "price": "$12.00"}
        response: Response = self.client.post(
            "/api/compile",
            json={"layout": LAYOUT, "values": values, "settings": {"copies": 4}},
        )
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.mimetype.startswith("text/plain"))
        self.assertEqual(
            response.get_data(as_text=True),
            compile_layout(layout_from_dict(LAYOUT), values, PrintSettings(copies=4)),
        )

    def test_template_and_fill(self) -> None:
        response: Response = self.client.post("/api/template", json={"layout": LAYOUT})
        self.assertEqual(response.status_code, 200)
        template = response.get_data(as_text=True)
        self.assertEqual(template, compile_template(layout_from_dict(LAYOUT)))
        self.assertIn("{{CARDNAME}}", template)

        response = self.client.post(
            "/api/fill",
            json={"template": template, "values": {"title": "Charizard", "price": "$1"}},
        )
        self.assertEqual(response.status_code, 200)
        body = response.get_data(as_text=True)
        self.assertIn("^FDCharizard^FS", body)
        self.assertIn("^PQ1", body.splitlines())
        self.assertNotIn("{{", body)

    def test_fit_returns_json(self) -> None:
        response: Response = self.client.post(
            "/api/fit",
            json={
                "text": "Base Set Charizard",
                "width": 150,
                "height": 80,
                "maxFontSize": 40,
                "minFontSize": 10,
                "allowTwoLines": True,
            },
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.get_json(),
            {
                "fontSize": 27,
                "lines": ["Base Set", "Charizard"],
                "isTwoLine": True,
                "isTruncated": False,
            },
        )

    def test_invalid_layout_is_bad_request(self) -> None:
        response: Response = self.client.post(
            "/api/compile", json={"layout": dict(LAYOUT, dpi=150)}
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("Unsupported dpi 150", response.get_json()["error"])

    def test_missing_layout_is_bad_request(self) -> None:
        response: Response = self.client.post("/api/template", json={})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json(), {"error": "Missing required key 'layout'."})

    def test_non_json_body_is_bad_request(self) -> None:
        response: Response = self.client.post(
            "/api/fill", data="^XA^XZ", content_type="text/plain"
        )
        self.assertEqual(response.status_code, 400)

    def test_fit_requires_numeric_width(self) -> None:
        response: Response = self.client.post(
            "/api/fit",
            json={"text": "A", "width": "wide", "maxFontSize": 20, "minFontSize": 10},
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("'width'", response.get_json()["error"])


    def test_fit_parses_numbers_like_layouts(self) -> None:
        body = {"text": "Charizard", "maxFontSize": 28, "minFontSize": 14}
        response: Response = self.client.post("/api/fit", json=dict(body, width="260"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()["fontSize"], 28)

        response = self.client.post("/api/fit", json=dict(body, width=12.7))
        self.assertEqual(response.status_code, 400)
        self.assertIn("'width' must be an integer", response.get_json()["error"])

    def test_fit_rejects_string_booleans(self) -> None:
        response: Response = self.client.post(
            "/api/fit",
            json={
                "text": "Base Set Charizard",
                "width": 150,
                "height": 80,
                "maxFontSize": 40,
                "minFontSize": 10,
                "allowTwoLines": "false",
            },
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("'allowTwoLines'", response.get_json()["error"])


class WebMainTests(unittest.TestCase):
    @patch("zpl_labels_web.run_web_app")
    @patch("zpl_labels_web.logging.basicConfig")
    def test_unknown_log_level_falls_back_to_info(
        self, mock_basic_config: Mock, mock_run: Mock
    ) -> None:
        with patch.dict(os.environ, {"LOG_LEVEL": "chatty"}):
            self.assertEqual(zpl_labels_web.main(["--port", "4100"]), 0)
        self.assertEqual(mock_basic_config.call_args.kwargs["level"], logging.INFO)
        mock_run.assert_called_once_with(host="127.0.0.1", port=4100)

    @patch("zpl_labels_web.run_web_app")
    @patch("zpl_labels_web.logging.basicConfig")
    def test_named_log_level_is_used(
        self, mock_basic_config: Mock, mock_run: Mock
    ) -> None:
        with patch.dict(os.environ, {"LOG_LEVEL": "debug"}):
            zpl_labels_web.main([])
        self.assertEqual(mock_basic_config.call_args.kwargs["level"], logging.DEBUG)


if __name__ == "__main__":
    unittest.main()
