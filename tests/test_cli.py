"""Tests for synthlang CLI commands."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from synthlang.cli.main import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("SYNTHLANG_CATALOG_PATH", "SYNTHLANG_STRICT", "SYNTHLANG_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


def _write_doc(tmp_path: Path, text: str, name: str = "patch.synth") -> Path:
    path = tmp_path / name
    path.write_text(text)
    return path


VALID_DOC = """\
variable bend = 100
lfo vibrato
  rate 6
oscillator lead
  wave sawtooth
key f
  pitch bend * 2
    modulation vibrato
  volume 150
"""

LEGACY_DOC = """\
lfo vibrato
oscillator lead
  pitch vibrato
"""


class TestDocumentCheck:
    def test_valid_document(self, runner, tmp_path):
        result = runner.invoke(cli, ["document", "check", str(_write_doc(tmp_path, VALID_DOC))])

        assert result.exit_code == 0
        assert "2 component(s), 1 trigger scope(s)" in result.output
        assert "Document is valid" in result.output

    def test_errors_exit_nonzero(self, runner, tmp_path):
        path = _write_doc(tmp_path, "lfo mod\nlfo mod\n")
        result = runner.invoke(cli, ["document", "check", str(path)])

        assert result.exit_code == 1
        assert "line 2: [ERROR]" in result.output
        assert "1 error(s) found" in result.output

    def test_warnings_still_valid(self, runner, tmp_path):
        path = _write_doc(tmp_path, LEGACY_DOC)
        result = runner.invoke(cli, ["document", "check", str(path)])

        assert result.exit_code == 0
        assert "Deprecated syntax" in result.output
        assert "1 warning(s) found" in result.output

    def test_strict_flag(self, runner, tmp_path):
        path = _write_doc(tmp_path, LEGACY_DOC)
        result = runner.invoke(cli, ["document", "check", "--strict", str(path)])

        assert result.exit_code == 1
        assert "takes a value" in result.output

    def test_strict_from_environment(self, runner, tmp_path, monkeypatch):
        monkeypatch.setenv("SYNTHLANG_STRICT", "true")
        path = _write_doc(tmp_path, LEGACY_DOC)
        result = runner.invoke(cli, ["document", "check", str(path)])

        assert result.exit_code == 1

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(cli, ["document", "check", str(tmp_path / "nope.synth")])
        assert result.exit_code == 2

    def test_bad_catalog_path(self, runner, tmp_path, monkeypatch):
        monkeypatch.setenv("SYNTHLANG_CATALOG_PATH", str(tmp_path / "missing.yaml"))
        path = _write_doc(tmp_path, VALID_DOC)
        result = runner.invoke(cli, ["document", "check", str(path)])

        assert result.exit_code == 1
        assert "Catalog file not found" in result.output


class TestDocumentDump:
    def test_dump_json(self, runner, tmp_path):
        path = _write_doc(tmp_path, VALID_DOC)
        result = runner.invoke(cli, ["document", "dump", str(path)])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["components"]["lfo"]["vibrato"]["attributes"]["rate"]["value"] == {
            "type": "literal",
            "value": 6,
        }
        assert "key_f" in data["triggers"]
        assert data["names"]["lead"]["kind"] == "oscillator"

    def test_dump_with_errors_exits_nonzero(self, runner, tmp_path):
        path = _write_doc(tmp_path, "note\n")
        result = runner.invoke(cli, ["document", "dump", str(path)])
        assert result.exit_code == 1


class TestDocumentActions:
    def test_actions(self, runner, tmp_path):
        path = _write_doc(tmp_path, VALID_DOC)
        result = runner.invoke(cli, ["document", "actions", str(path), "--scope", "key_f"])

        assert result.exit_code == 0
        actions = json.loads(result.output)
        assert [a["type"] for a in actions] == ["set_value", "apply_modulation", "set_value"]
        assert actions[0]["value"] == {"type": "expression", "source": "bend * 2"}
        assert actions[1]["modulator"]["kind"] == "lfo"
        assert actions[2]["unit"] == "percentage"

    def test_evaluate(self, runner, tmp_path):
        path = _write_doc(tmp_path, VALID_DOC)
        result = runner.invoke(
            cli, ["document", "actions", str(path), "--scope", "key_f", "--evaluate"]
        )

        actions = json.loads(result.output)
        assert actions[0]["resolved"] == 200
        assert actions[2]["resolved"] == 150
        assert "resolved" not in actions[1]

    def test_evaluate_non_finite_stays_valid_json(self, runner, tmp_path):
        path = _write_doc(tmp_path, "key f\n  pitch -1 / 0\n  volume 0 / 0\n")
        result = runner.invoke(
            cli, ["document", "actions", str(path), "--scope", "key_f", "--evaluate"]
        )

        assert result.exit_code == 0
        assert "Infinity" not in result.output
        assert "NaN" not in result.output
        actions = json.loads(result.output)
        assert [a["resolved"] for a in actions] == ["-inf", "nan"]

    def test_unknown_scope(self, runner, tmp_path):
        path = _write_doc(tmp_path, VALID_DOC)
        result = runner.invoke(cli, ["document", "actions", str(path), "--scope", "key_z"])

        assert result.exit_code == 1
        assert "Unknown scope 'key_z'" in result.output

    def test_scope_is_required(self, runner, tmp_path):
        path = _write_doc(tmp_path, VALID_DOC)
        result = runner.invoke(cli, ["document", "actions", str(path)])
        assert result.exit_code == 2


class TestCatalogCommands:
    def test_validate_shipped_catalog(self, runner):
        result = runner.invoke(cli, ["catalog", "validate"])

        assert result.exit_code == 0
        assert "Loaded 6 component kinds" in result.output
        assert "✓ oscillator (source" in result.output
        assert "Catalog is valid" in result.output

    def test_validate_invalid_file(self, runner, tmp_path):
        path = tmp_path / "catalog.yaml"
        path.write_text("components:\n  osc:\n    attributes: {}\ntriggers:\n  master: {}\n")
        result = runner.invoke(cli, ["catalog", "validate", "--path", str(path)])

        assert result.exit_code == 1
        assert "'role' is a required property" in result.output
        assert "schema error(s) found" in result.output

    def test_validate_semantic_failure(self, runner, tmp_path):
        path = tmp_path / "catalog.yaml"
        path.write_text(
            "components:\n"
            "  osc:\n"
            "    role: source\n"
            "    attributes:\n"
            "      level:\n"
            "        type: number\n"
            "        acceptsModulation: [ghost]\n"
            "triggers:\n"
            "  master: {}\n"
        )
        result = runner.invoke(cli, ["catalog", "validate", "--path", str(path)])

        assert result.exit_code == 1
        assert "Semantic validation failed" in result.output

    def test_show(self, runner):
        result = runner.invoke(cli, ["catalog", "show"])

        assert result.exit_code == 0
        assert "oscillator [source]" in result.output
        assert "note <name>: pitch, volume" in result.output

    def test_show_json(self, runner):
        result = runner.invoke(cli, ["catalog", "show", "--json"])

        data = json.loads(result.output)
        assert data["components"]["lfo"]["role"] == "modulator"


class TestVerbose:
    def test_verbose_flag_accepted(self, runner, tmp_path):
        path = _write_doc(tmp_path, VALID_DOC)
        result = runner.invoke(cli, ["--verbose", "document", "check", str(path)])
        assert result.exit_code == 0
