"""Tests for the track import command."""

import asyncio
import json

import pytest
import yaml
from click.testing import CliRunner

from beatqueue.cli.import_tracks import import_tracks
from beatqueue.persistence.store import SnapshotStore


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text(yaml.safe_dump({'storage': {'path': str(tmp_path / "state.db"), 'key': "import-test"}}))
    return path


@pytest.fixture
def payload_file(tmp_path):
    path = tmp_path / "tracks.json"
    path.write_text(json.dumps([
        {'_id': "1", 'title': "First", 'singer': "Someone", 'audioUrl': "https://cdn/1.mp3"},
        {'_id': "2", 'title': "Second"},
        {'_id': "1", 'title': "First again"},
        {'title': "Missing id"},
    ]))
    return path


def load_saved(tmp_path):
    store = SnapshotStore(tmp_path / "state.db", "import-test")
    return asyncio.run(store.load())


def test_import_into_uploads(tmp_path, config_file, payload_file):
    """Test importing tracks as uploads."""
    result = CliRunner().invoke(import_tracks, [str(payload_file), '--config', str(config_file)])

    assert result.exit_code == 0, result.output
    snapshot = load_saved(tmp_path)
    assert [t.id for t in snapshot.uploads] == ["1", "2"]
    assert snapshot.uploads[0].title == "First again"
    assert all(t.is_uploaded for t in snapshot.uploads)


def test_import_into_favorites(tmp_path, config_file, payload_file):
    """Test importing tracks as favorites."""
    result = CliRunner().invoke(import_tracks, [
        str(payload_file), '--target', "favorites", '--config', str(config_file)
    ])

    assert result.exit_code == 0, result.output
    snapshot = load_saved(tmp_path)
    assert [t.id for t in snapshot.favorites] == ["1", "2"]
    assert snapshot.favorites[0].title == "First"
    assert snapshot.uploads == ()


def test_import_keeps_existing_library(tmp_path, config_file, payload_file):
    """Test an import adds to what is already saved."""
    runner = CliRunner()
    runner.invoke(import_tracks, [str(payload_file), '--target', "favorites", '--config', str(config_file)])
    runner.invoke(import_tracks, [str(payload_file), '--config', str(config_file)])

    snapshot = load_saved(tmp_path)
    assert len(snapshot.favorites) == 2
    assert len(snapshot.uploads) == 2


def test_dry_run_saves_nothing(tmp_path, config_file, payload_file):
    """Test a dry run leaves storage untouched."""
    result = CliRunner().invoke(import_tracks, [str(payload_file), '--dry-run', '--config', str(config_file)])

    assert result.exit_code == 0, result.output
    assert load_saved(tmp_path) is None


def test_rejects_non_list(tmp_path, config_file):
    """Test a payload that is not a list is rejected."""
    path = tmp_path / "single.json"
    path.write_text(json.dumps({'_id': "1"}))

    result = CliRunner().invoke(import_tracks, [str(path), '--config', str(config_file)])

    assert result.exit_code != 0
    assert "JSON list" in result.output
