import json
from pathlib import Path

from typer.testing import CliRunner

from syllabuswatch import __version__
from syllabuswatch.cli.main import app

runner = CliRunner()


def _invoke(*args):
    return runner.invoke(app, [str(a) for a in args])


def test_version():
    result = _invoke("--version")

    assert result.exit_code == 0
    assert __version__ in result.output


def test_extract_json(outline_file, config_file):
    result = _invoke("deadlines", "extract", outline_file, "--now", "2024-08-01", "--format", "json", "--config", config_file)

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert len(data) == 14
    assert data[0]["title"] == "Assignment 1"
    assert data[0]["dueDate"] == "2024-09-15"
    assert {d["type"] for d in data} == {"assignment", "quiz", "exam"}


def test_extract_upcoming_window(outline_file, config_file):
    result = _invoke(
        "deadlines", "extract", outline_file,
        "--now", "2024-09-01", "--upcoming", "30", "--format", "json", "--config", config_file,
    )

    assert result.exit_code == 0, result.output
    assert [d["dueDate"] for d in json.loads(result.stdout)] == [
        "2024-09-15",
        "2024-09-15",
        "2024-09-22",
        "2024-09-22",
    ]


def test_extract_table(outline_file, config_file):
    result = _invoke("deadlines", "extract", outline_file, "--now", "2024-08-01", "--stats", "--config", config_file)

    assert result.exit_code == 0, result.output
    assert "Final Exam" in result.output
    assert "mostly assignment" in result.output
    assert "label_dash_due: 6" in result.output


def test_extract_empty_document(tmp_path, config_file):
    empty = tmp_path / "empty.txt"
    empty.write_text("Welcome to the course!", encoding="utf-8")

    result = _invoke("deadlines", "extract", empty, "--config", config_file)

    assert result.exit_code == 0
    assert "No deadlines found" in result.output


def test_extract_rejects_bad_now(outline_file, config_file):
    result = _invoke("deadlines", "extract", outline_file, "--now", "01/08/2024", "--config", config_file)

    assert result.exit_code == 1


def test_extract_missing_file(tmp_path, config_file):
    result = _invoke("deadlines", "extract", tmp_path / "missing.txt", "--config", config_file)

    assert result.exit_code != 0


def test_bad_config_exits(outline_file, tmp_path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("storage:\n  backend: redis\n", encoding="utf-8")

    result = _invoke("deadlines", "extract", outline_file, "--config", bad)

    assert result.exit_code == 1
    assert "Error loading config" in result.output


def test_track_reports_changes_between_runs(outline_file, config_file):
    track = ("track", "run", "CS101", outline_file, "--now", "2024-08-01", "--format", "json", "--config", config_file)

    first = _invoke(*track)
    assert first.exit_code == 0, first.output
    first_report = json.loads(first.stdout)
    assert first_report["hasChanges"] is True
    assert first_report["isFirstScrape"] is True
    assert len(first_report["added"]) == 14

    second = _invoke(*track)
    assert json.loads(second.stdout)["hasChanges"] is False

    text = outline_file.read_text(encoding="utf-8")
    outline_file.write_text(text.replace("September 22, 2024", "September 29, 2024"), encoding="utf-8")

    third = _invoke(*track)
    report = json.loads(third.stdout)
    assert report["hasChanges"] is True
    assert report["isFirstScrape"] is False
    moved = {m["new"]["title"]: m["new"]["dueDate"] for m in report["modified"]}
    assert moved == {"Lab Report 1": "2024-09-29"}


def test_track_table_output(outline_file, config_file):
    result = _invoke("track", "run", "CS101", outline_file, "--now", "2024-08-01", "--config", config_file)

    assert result.exit_code == 0, result.output
    assert "First scrape: 14 deadline(s)" in result.output


def test_track_storage_failure_exits_nonzero(outline_file, tmp_path):
    snapshots = tmp_path / "broken.json"
    snapshots.write_text("{not json", encoding="utf-8")
    config = tmp_path / "broken.yaml"
    config.write_text(
        f"storage:\n  path: {snapshots}\nlogging:\n  level: CRITICAL\n  rich_console: false\n",
        encoding="utf-8",
    )

    result = _invoke("track", "run", "CS101", outline_file, "--format", "json", "--config", config)

    assert result.exit_code == 1
    assert '"hasChanges": false' in result.output
    assert '"error"' in result.output


def test_snapshot_commands(outline_file, config_file):
    _invoke("track", "run", "CS101", outline_file, "--now", "2024-08-01", "--config", config_file)

    listed = _invoke("snapshots", "list", "--config", config_file)
    assert listed.exit_code == 0
    assert "CS101" in listed.output

    shown = _invoke("snapshots", "show", "CS101", "--format", "json", "--config", config_file)
    assert shown.exit_code == 0
    snapshot = json.loads(shown.stdout)
    assert len(snapshot["hash"]) == 32
    assert len(snapshot["deadlines"]) == 14

    cleared = _invoke("snapshots", "clear", "CS101", "--yes", "--config", config_file)
    assert cleared.exit_code == 0

    assert "No snapshots stored" in _invoke("snapshots", "list", "--config", config_file).output
    assert _invoke("snapshots", "show", "CS101", "--config", config_file).exit_code == 1
    assert _invoke("snapshots", "clear", "CS101", "--yes", "--config", config_file).exit_code == 1


def test_clear_asks_for_confirmation(outline_file, config_file):
    _invoke("track", "run", "CS101", outline_file, "--now", "2024-08-01", "--config", config_file)

    result = runner.invoke(app, ["snapshots", "clear", "CS101", "--config", str(config_file)], input="n\n")

    assert result.exit_code == 1
    assert "CS101" in _invoke("snapshots", "list", "--config", config_file).output


def test_init_writes_config(tmp_path):
    with runner.isolated_filesystem(temp_dir=tmp_path):
        first = _invoke("init")
        assert first.exit_code == 0, first.output
        assert Path("configs/app.yaml").exists()
        assert Path("data").is_dir()

        assert _invoke("init").exit_code == 1
        assert _invoke("init", "--force").exit_code == 0
