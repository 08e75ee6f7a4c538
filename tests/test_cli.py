"""Test the command-line interface"""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from snapshot_sync import __version__
from snapshot_sync.cli import cli
from snapshot_sync.core.database import Database


@pytest.fixture
def cli_runner():
    return CliRunner()


@pytest.fixture
def output_dir(temp_dir):
    path = temp_dir / "out"
    path.mkdir()
    return path


@pytest.fixture
def config_file(temp_dir, output_dir):
    path = temp_dir / "config.yaml"
    path.write_text(f"output:\n  directory: {output_dir}\n", encoding="utf-8")
    return path


@pytest.fixture
def located_config(cli_runner, config_file, sync_dir):
    """Config file with the sync location already chosen"""
    result = invoke(cli_runner, config_file, "set-location", str(sync_dir))
    assert result.exit_code == 0, result.output
    return config_file


def invoke(cli_runner, config_file, *args):
    return cli_runner.invoke(cli, ["--config", str(config_file), *args], obj={})


def seed_database(output_dir, **rows):
    database = Database(output_dir / "database.db")
    try:
        for table, table_rows in rows.items():
            database.upsert_rows(table, table_rows)
    finally:
        database.close()


def read_table(output_dir, table):
    database = Database(output_dir / "database.db")
    try:
        return database.fetch_all(table)
    finally:
        database.close()


class TestCommands:
    """Test export, import and set-location end to end"""

    def test_version(self, cli_runner):
        result = cli_runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_export_without_location_is_skipped(self, cli_runner, config_file):
        result = invoke(cli_runner, config_file, "export")

        assert result.exit_code == 0, result.output
        assert "skipped" in result.output

    def test_set_location(self, cli_runner, config_file, sync_dir):
        result = invoke(cli_runner, config_file, "set-location", str(sync_dir))

        assert result.exit_code == 0
        assert str(sync_dir.resolve()) in result.output
        assert str(sync_dir.resolve()) in config_file.read_text(encoding="utf-8")

    def test_set_location_requires_directory(self, cli_runner, config_file, temp_dir):
        result = invoke(cli_runner, config_file, "set-location", str(temp_dir / "missing"))

        assert result.exit_code != 0

    def test_export_writes_snapshot(self, cli_runner, located_config, output_dir, sync_dir):
        seed_database(output_dir, search_history=[{"query": "cats"}])

        result = invoke(cli_runner, located_config, "export")

        assert result.exit_code == 0, result.output
        assert "success" in result.output
        document = json.loads((sync_dir / "libretube_autosync.json").read_text(encoding="utf-8"))
        assert document["searchHistory"] == [{"query": "cats"}]
        assert document["playlists"] == []

    def test_import_applies_snapshot(self, cli_runner, located_config, output_dir, sync_dir):
        document = {
            "watchPositions": [{"videoId": "v1", "position": 50}],
            "localPlaylists": [{"playlist": {"name": "Mix", "id": 9}, "videos": [{"videoId": "A"}]}],
        }
        (sync_dir / "libretube_autosync.json").write_text(json.dumps(document), encoding="utf-8")

        result = invoke(cli_runner, located_config, "import")

        assert result.exit_code == 0, result.output
        assert read_table(output_dir, "watch_positions") == [{"video_id": "v1", "position": 50}]

    def test_import_corrupt_snapshot(self, cli_runner, located_config, sync_dir):
        (sync_dir / "libretube_autosync.json").write_text("{ broken", encoding="utf-8")

        result = invoke(cli_runner, located_config, "import")

        assert result.exit_code == 3

    def test_logs_are_written(self, cli_runner, located_config, output_dir):
        invoke(cli_runner, located_config, "export")

        log_names = [path.name for path in (output_dir / "logs").iterdir()]
        assert any(name.startswith("log_full_") for name in log_names)
        assert any(name.startswith("log_errors_") for name in log_names)
        assert any(name.startswith("import_conflicts_") for name in log_names)

    def test_session_imports_then_exports(self, cli_runner, located_config, output_dir, sync_dir):
        """The session ends at once when the stop event is already set"""
        document = {"searchHistory": [{"query": "remote"}]}
        (sync_dir / "libretube_autosync.json").write_text(json.dumps(document), encoding="utf-8")
        seed_database(output_dir, search_history=[{"query": "local"}])

        with patch("snapshot_sync.cli.threading") as threading_mock:
            threading_mock.Event.return_value.wait.return_value = True
            result = invoke(cli_runner, located_config, "session")

        assert result.exit_code == 0, result.output
        written = json.loads((sync_dir / "libretube_autosync.json").read_text(encoding="utf-8"))
        assert written["searchHistory"] == [{"query": "remote"}, {"query": "local"}]


class TestErrors:
    """Test exit codes for configuration and status output"""

    def test_missing_config(self, cli_runner, temp_dir):
        result = invoke(cli_runner, temp_dir / "missing.yaml", "export")

        assert result.exit_code == 1
        assert "Configuration error" in result.output

    def test_invalid_config(self, cli_runner, temp_dir):
        path = temp_dir / "config.yaml"
        path.write_text("output:\n  directory: ''\n", encoding="utf-8")

        result = invoke(cli_runner, path, "import")

        assert result.exit_code == 1

    def test_status_without_location(self, cli_runner, config_file):
        result = invoke(cli_runner, config_file, "status")

        assert result.exit_code == 0
        assert "not set" in result.output
        assert "search_history" in result.output

    def test_status_with_location(self, cli_runner, located_config):
        result = invoke(cli_runner, located_config, "status")

        assert result.exit_code == 0
        assert "writable" in result.output
        assert "missing" in result.output
