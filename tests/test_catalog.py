"""
Tests for synthlang.catalog

Covers:
  - load_default_catalog(): the shipped catalog loads and is consistent
  - CatalogLoader: YAML to schema types, semantic checks
  - validate_yaml_file(): JSON Schema validation (valid + invalid)
  - validate_catalog_file(): catalog + chord table, strict escalation
"""
from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from synthlang.catalog import (
    DEFAULT_CATALOG_PATH,
    DEFAULT_CHORDS_PATH,
    AttributeType,
    CatalogError,
    CatalogLoader,
    ComponentRole,
    describe_catalog,
    load_catalog,
    load_default_catalog,
    validate_catalog_file,
)
from synthlang.catalog.validator import CHORDS_SCHEMA, validate_yaml_file


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _write_yaml(path: Path, data: dict) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.dump(data))
    return path


def _minimal_catalog() -> dict:
    return {
        "components": {
            "osc": {
                "role": "source",
                "attributes": {
                    "level": {"type": "number", "min": 0, "max": 10, "default": 5},
                    "shape": {"type": "enum", "values": ["a", "b"], "default": "a"},
                },
            },
            "wobble": {
                "role": "modulator",
                "attributes": {"rate": {"type": "number", "default": 1}},
            },
        },
        "triggers": {
            "master": {
                "canHaveAttributes": True,
                "attributes": {
                    "out": {"type": "component_ref", "acceptsComponents": ["osc"]},
                },
            },
            "note": {"requiresName": True},
        },
    }


# ---------------------------------------------------------------------------
# Shipped catalog
# ---------------------------------------------------------------------------


class TestDefaultCatalog:
    @pytest.fixture(scope="class")
    def catalog(self):
        return load_default_catalog()

    def test_component_kinds(self, catalog):
        assert set(catalog.component_kinds()) == {
            "oscillator",
            "lfo",
            "envelope",
            "noise",
            "filter",
            "compressor",
        }

    def test_trigger_kinds(self, catalog):
        assert catalog.trigger_kinds() == ["master", "note", "key"]

    def test_modulator_kinds_come_from_roles(self, catalog):
        assert catalog.modulator_kinds() == ["lfo", "envelope", "noise"]

    def test_note_and_key_require_names(self, catalog):
        assert catalog.get_trigger_schema("note").requires_name is True
        assert catalog.get_trigger_schema("key").requires_name is True
        assert catalog.get_trigger_schema("master").requires_name is False

    def test_note_and_key_share_voice_attributes(self, catalog):
        note = catalog.get_trigger_schema("note").attributes
        key = catalog.get_trigger_schema("key").attributes
        assert list(note) == ["pitch", "volume"]
        assert list(key) == ["pitch", "volume"]

    def test_pitch_accepts_modulators(self, catalog):
        pitch = catalog.get_attribute_schema("oscillator", "pitch")
        assert pitch.receives_modulation
        assert pitch.accepts("lfo")
        assert not pitch.accepts("compressor")
        assert pitch.can_reference_variables

    def test_master_filter_is_reference(self, catalog):
        attr = catalog.get_trigger_attribute_schema("master", "filter")
        assert attr.type == AttributeType.COMPONENT_REF
        assert attr.is_reference
        assert attr.accepts("filter")
        assert not attr.accepts("lfo")

    def test_chord_values_from_chord_table(self, catalog):
        chord = catalog.get_trigger_attribute_schema("master", "chord")
        assert chord.values[0] == "none"
        assert "major" in chord.values
        assert "minor7" in chord.values
        assert chord.allow_custom is True

    def test_chord_intervals_drop_root(self, catalog):
        assert catalog.chord_intervals("major") == [4, 7]
        assert catalog.chord_intervals("none") == []
        assert catalog.chord_intervals("unknown") == []

    def test_can_attribute_helpers(self, catalog):
        assert catalog.can_attribute_accept_component("filter", "frequency", "lfo")
        assert not catalog.can_attribute_accept_component("filter", "missing", "lfo")
        assert catalog.can_attribute_reference_variable("lfo", "rate")
        assert not catalog.can_attribute_reference_variable("lfo", "wave")

    def test_describe_catalog(self, catalog):
        summary = describe_catalog(catalog)
        assert summary["components"]["lfo"]["role"] == "modulator"
        assert "rate" in summary["components"]["lfo"]["attributes"]
        assert summary["triggers"]["note"]["requiresName"] is True


# ---------------------------------------------------------------------------
# CatalogLoader
# ---------------------------------------------------------------------------


class TestCatalogLoader:
    def test_loads_minimal_catalog(self, tmp_path):
        path = _write_yaml(tmp_path / "catalog.yaml", _minimal_catalog())
        catalog = CatalogLoader(path, tmp_path / "no-chords.yaml").load()

        assert catalog.get_component_schema("osc").role == ComponentRole.SOURCE
        level = catalog.get_attribute_schema("osc", "level")
        assert level.type == AttributeType.NUMBER
        assert level.default == 5
        assert catalog.chords == {}

    def test_trigger_defaults(self, tmp_path):
        path = _write_yaml(tmp_path / "catalog.yaml", _minimal_catalog())
        note = load_catalog(path).get_trigger_schema("note")

        assert note.can_have_attributes is False
        assert note.can_contain_components is True
        assert note.can_override_variables is True

    def test_missing_file(self, tmp_path):
        with pytest.raises(CatalogError, match="not found"):
            load_catalog(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("components: [unclosed")
        with pytest.raises(CatalogError, match="Invalid YAML"):
            load_catalog(path)

    def test_unknown_role(self, tmp_path):
        data = _minimal_catalog()
        data["components"]["osc"]["role"] = "mixer"
        path = _write_yaml(tmp_path / "catalog.yaml", data)
        with pytest.raises(CatalogError, match="unknown role"):
            load_catalog(path)

    def test_unknown_attribute_type(self, tmp_path):
        data = _minimal_catalog()
        data["components"]["osc"]["attributes"]["level"]["type"] = "decibel"
        path = _write_yaml(tmp_path / "catalog.yaml", data)
        with pytest.raises(CatalogError, match="unknown type"):
            load_catalog(path)

    def test_enum_without_values(self, tmp_path):
        data = _minimal_catalog()
        data["components"]["osc"]["attributes"]["shape"]["values"] = []
        path = _write_yaml(tmp_path / "catalog.yaml", data)
        with pytest.raises(CatalogError, match="has no values"):
            load_catalog(path)

    def test_allow_list_names_unknown_kind(self, tmp_path):
        data = _minimal_catalog()
        data["components"]["osc"]["attributes"]["level"]["acceptsModulation"] = ["ghost"]
        path = _write_yaml(tmp_path / "catalog.yaml", data)
        with pytest.raises(CatalogError, match="unknown component kind 'ghost'"):
            load_catalog(path)

    def test_reference_without_allow_list(self, tmp_path):
        data = _minimal_catalog()
        del data["triggers"]["master"]["attributes"]["out"]["acceptsComponents"]
        path = _write_yaml(tmp_path / "catalog.yaml", data)
        with pytest.raises(CatalogError, match="has no acceptsComponents"):
            load_catalog(path)

    def test_trigger_attributes_require_flag(self, tmp_path):
        data = _minimal_catalog()
        data["triggers"]["master"]["canHaveAttributes"] = False
        path = _write_yaml(tmp_path / "catalog.yaml", data)
        with pytest.raises(CatalogError, match="canHaveAttributes is false"):
            load_catalog(path)

    def test_values_from_chords(self, tmp_path):
        data = _minimal_catalog()
        data["triggers"]["master"]["attributes"]["chord"] = {
            "type": "enum",
            "valuesFrom": "chords",
            "default": "none",
        }
        path = _write_yaml(tmp_path / "catalog.yaml", data)
        chords = _write_yaml(
            tmp_path / "chords.yaml",
            {"chords": [{"name": "fifth", "semitones": [0, 7]}]},
        )
        catalog = load_catalog(path, chords)

        assert catalog.get_trigger_attribute_schema("master", "chord").values == ["none", "fifth"]
        assert catalog.chord_intervals("fifth") == [7]

    @pytest.mark.parametrize(
        "chords, message",
        [
            ([{"semitones": [0, 4, 7]}], "Chord entry 0 .* needs a string 'name'"),
            (["major"], "Chord entry 0 .* must be a mapping"),
            ([{"name": "odd", "semitones": "0 4 7"}], "Chord 'odd' .* integer 'semitones'"),
            ({"major": [0, 4, 7]}, "'chords' .* must be a list"),
        ],
    )
    def test_malformed_chord_table(self, tmp_path, chords, message):
        path = _write_yaml(tmp_path / "catalog.yaml", _minimal_catalog())
        chords_path = _write_yaml(tmp_path / "chords.yaml", {"chords": chords})
        with pytest.raises(CatalogError, match=message):
            load_catalog(path, chords_path)


# ---------------------------------------------------------------------------
# JSON Schema validation
# ---------------------------------------------------------------------------


class TestValidateYamlFile:
    def test_shipped_catalog_is_valid(self):
        assert validate_yaml_file(DEFAULT_CATALOG_PATH) == []

    def test_shipped_chords_are_valid(self):
        assert validate_yaml_file(DEFAULT_CHORDS_PATH, CHORDS_SCHEMA) == []

    def test_minimal_catalog_is_valid(self, tmp_path):
        path = _write_yaml(tmp_path / "catalog.yaml", _minimal_catalog())
        assert validate_yaml_file(path) == []

    def test_missing_role(self, tmp_path):
        data = _minimal_catalog()
        del data["components"]["osc"]["role"]
        path = _write_yaml(tmp_path / "catalog.yaml", data)

        issues = validate_yaml_file(path)
        assert len(issues) == 1
        assert "'role' is a required property" in issues[0].message
        assert issues[0].path == "components/osc"

    def test_unknown_attribute_key(self, tmp_path):
        data = _minimal_catalog()
        data["components"]["osc"]["attributes"]["level"]["colour"] = "red"
        path = _write_yaml(tmp_path / "catalog.yaml", data)

        issues = validate_yaml_file(path)
        assert issues
        assert issues[0].path == "components/osc/attributes/level"

    def test_bad_attribute_type(self, tmp_path):
        data = _minimal_catalog()
        data["components"]["osc"]["attributes"]["level"]["type"] = "decibel"
        path = _write_yaml(tmp_path / "catalog.yaml", data)

        issues = validate_yaml_file(path)
        assert issues[0].path == "components/osc/attributes/level/type"
        assert issues[0].severity == "error"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("   \n")

        issues = validate_yaml_file(path)
        assert "empty" in issues[0].message

    def test_yaml_parse_error(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("components: {osc: [")

        issues = validate_yaml_file(path)
        assert "YAML parse error" in issues[0].message

    def test_default_outside_range_is_warning(self, tmp_path):
        data = _minimal_catalog()
        data["components"]["osc"]["attributes"]["level"]["default"] = 50
        path = _write_yaml(tmp_path / "catalog.yaml", data)

        issues = validate_yaml_file(path)
        assert len(issues) == 1
        assert issues[0].severity == "warning"
        assert "outside" in issues[0].message

    def test_chord_semitones_must_be_integers(self, tmp_path):
        path = _write_yaml(
            tmp_path / "chords.yaml",
            {"chords": [{"name": "odd", "semitones": [0, "four"]}]},
        )
        issues = validate_yaml_file(path, CHORDS_SCHEMA)
        assert issues
        assert issues[0].path == "chords[0]/semitones[1]"


class TestValidateCatalogFile:
    def test_missing_file(self, tmp_path):
        issues = validate_catalog_file(tmp_path / "missing.yaml")
        assert len(issues) == 1
        assert "does not exist" in issues[0].message

    def test_catalog_and_chords(self):
        assert validate_catalog_file(DEFAULT_CATALOG_PATH, DEFAULT_CHORDS_PATH) == []

    def test_strict_escalates_warnings(self, tmp_path):
        data = _minimal_catalog()
        data["components"]["osc"]["attributes"]["level"]["default"] = -1
        path = _write_yaml(tmp_path / "catalog.yaml", data)

        relaxed = validate_catalog_file(path)
        strict = validate_catalog_file(path, strict=True)
        assert [i.severity for i in relaxed] == ["warning"]
        assert [i.severity for i in strict] == ["error"]

    def test_issue_str(self, tmp_path):
        data = _minimal_catalog()
        del data["components"]["osc"]["role"]
        path = _write_yaml(tmp_path / "catalog.yaml", data)

        issue = validate_catalog_file(path)[0]
        assert str(issue).startswith("[ERROR]")
        assert "at components/osc" in str(issue)
