import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from unittest.mock import patch

import zpl_labels
from label_layout import PrintSettings, compile_layout, compile_template
from label_layout.serialization import layout_from_dict

LAYOUT = {
    "id": "layout-1",
    "name": "Raw Card",
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
            "alignment": "left",
            "maxFontSize": 28,
            "minFontSize": 14,
        },
        {
            "id": "bc",
            "fieldKey": "barcode",
            "x": 10,
            "y": 100,
            "width": 300,
            "height": 50,
            "maxFontSize": 30,
            "minFontSize": 12,
        },
    ],
}
VALUES = {"title": "Charizard", "sku": "SKU-1234"}


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        env = {k: v for k, v in os.environ.items() if not k.startswith("ZPL_")}
        patcher = patch.dict(os.environ, env, clear=True)
        patcher.start()
        self.addCleanup(patcher.stop)

        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.tmp = Path(tmp.name)
        self.layout_path = self._write("layout.json", json.dumps(LAYOUT))
        self.values_path = self._write("values.json", json.dumps(VALUES))

    def _write(self, name: str, text: str) -> str:
        path = self.tmp / name
        path.write_text(text, encoding="utf-8")
        return str(path)

    def _run(self, *argv: str) -> str:
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            self.assertEqual(zpl_labels.main(list(argv)), 0)
        return buffer.getvalue()

    def test_compile_prints_zpl(self) -> None:
        output = self._run("compile", self.layout_path, self.values_path, "--copies", "2")
        expected = compile_layout(
            layout_from_dict(LAYOUT), VALUES, PrintSettings(copies=2)
        )
        self.assertEqual(output, expected + "\n")
        self.assertIn("^FDSKU-1234^FS", output)

    def test_compile_reads_settings_from_environment(self) -> None:
        os.environ["ZPL_PRINT_DARKNESS"] = "18"
        output = self._run("compile", self.layout_path, self.values_path)
        self.assertIn("^MD18", output.splitlines())

    def test_template_writes_output_file(self) -> None:
        target = self.tmp / "label.zpl"
        output = self._run("template", self.layout_path, "-o", str(target))
        self.assertEqual(output.strip(), f"Wrote {target}")
        self.assertEqual(
            target.read_text(encoding="utf-8"),
            compile_template(layout_from_dict(LAYOUT)) + "\n",
        )

    def test_fill_matches_compile(self) -> None:
        template_path = self.tmp / "label.zpl"
        self._run("template", self.layout_path, "-o", str(template_path))
        output = self._run("fill", str(template_path), self.values_path, "--speed", "6")
        expected = compile_layout(
            layout_from_dict(LAYOUT), VALUES, PrintSettings(speed=6)
        )
        self.assertEqual(output, expected + "\n")

    def test_fit_prints_json(self) -> None:
        output = self._run(
            "fit", "Base Set Charizard",
            "--width", "150", "--height", "80",
            "--max-font", "40", "--min-font", "10",
            "--two-lines",
        )
        self.assertEqual(
            json.loads(output),
            {
                "fontSize": 27,
                "lines": ["Base Set", "Charizard"],
                "isTwoLine": True,
                "isTruncated": False,
            },
        )

    def test_invalid_layout_exits(self) -> None:
        bad = self._write("bad.json", json.dumps(dict(LAYOUT, dpi=600)))
        with self.assertRaises(SystemExit) as ctx:
            self._run("compile", bad)
        self.assertIn("Unsupported dpi 600", str(ctx.exception))

    def test_malformed_json_exits(self) -> None:
        bad = self._write("bad.json", "{not json")
        with self.assertRaises(SystemExit) as ctx:
            self._run("template", bad)
        self.assertIn("Invalid JSON", str(ctx.exception))

    def test_bad_environment_integer_exits(self) -> None:
        os.environ["ZPL_COPIES"] = "many"
        with self.assertRaises(SystemExit) as ctx:
            self._run("compile", self.layout_path)
        self.assertIn("ZPL_COPIES", str(ctx.exception))

    def test_bad_environment_integer_is_ignored_when_unused(self) -> None:
        os.environ["ZPL_COPIES"] = "many"
        output = self._run("fit", "Charizard", "--width", "260", "--max-font", "28")
        self.assertEqual(json.loads(output)["fontSize"], 28)
        self._run("template", self.layout_path)

    def test_command_line_setting_overrides_bad_environment(self) -> None:
        os.environ["ZPL_COPIES"] = "many"
        output = self._run("compile", self.layout_path, self.values_path, "--copies", "3")
        self.assertIn("^PQ3", output.splitlines())


if __name__ == "__main__":
    unittest.main()
