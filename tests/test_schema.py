import json
import tempfile
import unittest
from pathlib import Path

from schema_tui.errors import SchemaError
from schema_tui.schema import (
    BooleanType,
    ConfigSchema,
    EnumType,
    FileListSource,
    FileTypeFilter,
    FloatType,
    NumberType,
    PathType,
    SchemaParser,
    SchemaSection,
    SchemaValidator,
    ScriptSource,
    StaticSource,
    StringType,
    UIWidget,
    parse_option_source,
)

DOCUMENT = {
    "version": "1.0",
    "title": "App",
    "sections": [
        {
            "id": "general",
            "title": "General",
            "icon": "⚙",
            "visible_when": "x.y == true",
            "fields": [
                {
                    "id": "name",
                    "label": "Name",
                    "description": "Display name",
                    "type": "string",
                    "max_length": 10,
                },
                {
                    "id": "theme",
                    "label": "Theme",
                    "description": "Theme",
                    "type": "enum",
                    "ui_widget": "dropdown_searchable",
                    "default": "Dark",
                    "options_source": {
                        "type": "script",
                        "command": "themes ${general.name}",
                        "cache_duration": 30,
                        "depends_on": ["general.name"],
                    },
                },
                {
                    "id": "ratio",
                    "label": "Ratio",
                    "description": "Ratio",
                    "type": "float",
                    "min": 0,
                    "max": 1,
                    "step": 0.05,
                    "subsection": "Tuning",
                },
                {
                    "id": "file",
                    "label": "File",
                    "description": "Input file",
                    "type": "path",
                    "file_type": "json",
                    "must_exist": True,
                    "keybind": "ctrl+o",
                },
                {
                    "id": "on",
                    "label": "On",
                    "description": "Enabled",
                    "type": "boolean",
                    "default": True,
                },
            ],
        }
    ],
}


class SchemaParserTests(unittest.TestCase):
    def test_parse_document(self) -> None:
        schema = SchemaParser.from_string(json.dumps(DOCUMENT))
        self.assertEqual(schema.title, "App")
        section = schema.sections[0]
        self.assertEqual(section.icon, "⚙")
        self.assertEqual(section.visible_when, "x.y == true")
        name, theme, ratio, path, flag = section.fields
        self.assertEqual(name.field_type, StringType(default=None, max_length=10))
        self.assertEqual(name.ui_widget, UIWidget.TEXT_INPUT)
        self.assertIsInstance(theme.field_type, EnumType)
        self.assertEqual(theme.ui_widget, UIWidget.DROPDOWN_SEARCHABLE)
        self.assertEqual(
            theme.field_type.options_source,
            ScriptSource(command="themes ${general.name}", cache_duration=30, depends_on=("general.name",)),
        )
        self.assertEqual(ratio.field_type, FloatType(default=None, min=0.0, max=1.0, step=0.05))
        self.assertEqual(ratio.subsection, "Tuning")
        self.assertEqual(path.field_type, PathType(default=None, file_type=FileTypeFilter.JSON, must_exist=True))
        self.assertEqual(path.keybind, "ctrl+o")
        self.assertEqual(flag.field_type, BooleanType(default=True))

    def test_defaults_and_fallbacks(self) -> None:
        schema = SchemaParser.from_dict(DOCUMENT)
        self.assertEqual(schema.defaults(), {"general.theme": "Dark", "general.on": True})
        ratio = schema.find_field("general.ratio")
        self.assertEqual(ratio.fallback_value(), 0.0)
        self.assertEqual(schema.find_field("general.name").fallback_value(), "")
        self.assertIsNone(schema.find_field("general.nope"))

    def test_from_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "schema.json"
            path.write_text(json.dumps(DOCUMENT), encoding="utf-8")
            self.assertEqual(SchemaParser.from_file(path).version, "1.0")

    def test_invalid_documents(self) -> None:
        bad_field = dict(DOCUMENT["sections"][0]["fields"][0], type="color")
        cases = [
            "{not json",
            json.dumps([]),
            json.dumps({"version": "1"}),
            json.dumps({"version": "1", "sections": [{"id": "s", "title": "S", "fields": [bad_field]}]}),
            json.dumps({"sections": []}),
        ]
        for content in cases:
            with self.subTest(content=content):
                with self.assertRaises(SchemaError):
                    SchemaParser.from_string(content)

    def test_option_sources(self) -> None:
        self.assertEqual(parse_option_source({"type": "static", "values": ["a", 1]}), StaticSource(values=("a", "1")))
        self.assertEqual(
            parse_option_source({"type": "file_list", "directory": "~/m", "pattern": "*.bin", "extract": "(.*)"}),
            FileListSource(directory="~/m", pattern="*.bin", extract="(.*)"),
        )
        with self.assertRaises(SchemaError):
            parse_option_source({"type": "http"})
        with self.assertRaises(SchemaError):
            parse_option_source({"type": "script", "command": "x", "cache_duration": "soon"})


class SchemaValidatorTests(unittest.TestCase):
    def test_validate_schema(self) -> None:
        SchemaValidator.validate_schema(SchemaParser.from_dict(DOCUMENT))
        with self.assertRaises(SchemaError):
            SchemaValidator.validate_schema(ConfigSchema(version="1"))
        with self.assertRaises(SchemaError):
            SchemaValidator.validate_schema(ConfigSchema(version="1", sections=(SchemaSection(id="s", title="S"),)))

    def test_validate_values(self) -> None:
        SchemaValidator.validate_value(StringType(default=None, max_length=3), "abc")
        SchemaValidator.validate_value(NumberType(default=None, min=1, max=5), 5)
        SchemaValidator.validate_value(FloatType(default=None, min=0.0, max=1.0, step=None), 1)
        rejected = [
            (StringType(default=None, max_length=3), "abcd"),
            (NumberType(default=None, min=1, max=5), 0),
            (NumberType(default=None, min=None, max=None), True),
            (FloatType(default=None, min=0.0, max=1.0, step=None), 1.5),
            (BooleanType(), "true"),
            (EnumType(options_source=StaticSource(values=()), default=None), 3),
            (PathType(default=None, file_type=None, must_exist=True), "/definitely/not/here"),
        ]
        for field_type, value in rejected:
            with self.subTest(field_type=field_type, value=value):
                with self.assertRaises(SchemaError):
                    SchemaValidator.validate_value(field_type, value)


if __name__ == "__main__":
    unittest.main()
