"""
Tests for the click CLI.
"""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from schoolportal.main import cli
from schoolportal.persistence.coordinator import PersistenceCoordinator


@pytest.fixture(autouse=True)
def _no_logging_setup():
    # setup_logging() replaces the root handlers pytest installs
    with patch("schoolportal.main.setup_logging"):
        yield


@pytest.fixture
def run(config):
    runner = CliRunner()

    def invoke(*args, input=None):
        return runner.invoke(cli, list(args), obj={"config": config}, input=input)

    return invoke


def _local(config):
    return PersistenceCoordinator.from_config(config).load_local()


class TestStatus:
    def test_status(self, run):
        result = run("status")
        assert result.exit_code == 0
        assert "Bagpur Masum Ali Pramanik High School" in result.output
        assert "Loaded from:  default" in result.output
        assert "not configured" in result.output
        assert "Notices" in result.output


class TestShowAndExport:
    def test_show_field(self, run):
        result = run("show", "--field", "notices")
        assert result.exit_code == 0
        assert json.loads(result.output)[0]["id"] == "n1"

    def test_show_snake_case_field(self, run):
        result = run("show", "--field", "school_name")
        assert json.loads(result.output) == "Bagpur Masum Ali Pramanik High School"

    def test_show_unknown_field(self, run):
        result = run("show", "--field", "nope")
        assert result.exit_code != 0
        assert "Unknown field: nope" in result.output

    def test_export_and_import(self, run, config, tmp_path):
        out = tmp_path / "backup.json"
        assert run("export", str(out)).exit_code == 0

        data = json.loads(out.read_text(encoding="utf-8"))
        data["schoolName"] = "Imported School"
        out.write_text(json.dumps(data), encoding="utf-8")

        result = run("import", str(out))

        assert result.exit_code == 0
        assert "Local store:  saved" in result.output
        assert "Cloud sync:   local_only" in result.output
        assert _local(config).school_name == "Imported School"

    def test_import_invalid_json(self, run, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text("{oops", encoding="utf-8")
        result = run("import", str(bad))
        assert result.exit_code != 0
        assert "not valid JSON" in result.output

    def test_import_invalid_document(self, run, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text(json.dumps({"notices": "nope"}), encoding="utf-8")
        result = run("import", str(bad))
        assert result.exit_code != 0
        assert "not a valid document" in result.output


class TestSetField:
    def test_set_text_field(self, run, config):
        result = run("set-field", "schoolName", "New Name")
        assert result.exit_code == 0
        assert _local(config).school_name == "New Name"

    def test_set_boolean_field(self, run, config):
        assert run("set-field", "isAdmissionOpen", "false").exit_code == 0
        assert _local(config).is_admission_open is False

    def test_numeric_text_stays_string(self, run, config):
        assert run("set-field", "eiin", "999999").exit_code == 0
        assert _local(config).eiin == "999999"

    def test_unknown_field(self, run):
        result = run("set-field", "notices", "[]")
        assert result.exit_code != 0
        assert "Unknown" in result.output


class TestResetDefaults:
    def test_confirmation_cancel(self, run, config):
        run("set-field", "schoolName", "Changed")
        result = run("reset-defaults", input="n\n")
        assert "Cancelled." in result.output
        assert _local(config).school_name == "Changed"

    def test_reset_with_yes(self, run, config):
        run("set-field", "schoolName", "Changed")
        result = run("reset-defaults", "--yes")
        assert result.exit_code == 0
        assert _local(config).school_name == "Bagpur Masum Ali Pramanik High School"


class TestSync:
    def test_sync_offline_is_an_error(self, run):
        result = run("sync")
        assert result.exit_code != 0
        assert "not configured or offline" in result.output

    def test_data_dir_override(self, config, tmp_path):
        other = tmp_path / "elsewhere"
        result = CliRunner().invoke(
            cli,
            ["--data-dir", str(other), "set-field", "motto", "Hello"],
            obj={"config": config},
        )
        assert result.exit_code == 0
        assert (other / "portal_db.json").exists()
