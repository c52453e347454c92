from __future__ import annotations

import json

from typer.testing import CliRunner

from toasttv.cli.main import app

runner = CliRunner()


def _write_fixture(tmp_path):
    catalog = tmp_path / "catalog.json"
    catalog.write_text(
        json.dumps(
            {
                "media": [
                    {"id": 1, "path": "/m/ep1.mp4", "duration_seconds": 290},
                    {"id": 2, "path": "/m/ep2.mp4", "duration_seconds": 290},
                    {"id": 3, "path": "/m/ep3.mp4", "duration_seconds": 290},
                    {"id": 10, "path": "/m/bumper.mp4", "duration_seconds": 30, "media_type": "interlude"},
                    {"id": 20, "path": "/m/toast_intro.mp4", "duration_seconds": 10, "media_type": "intro"},
                    {"id": 21, "path": "/m/toast_outro.mp4", "duration_seconds": 20, "media_type": "outro"},
                ]
            }
        )
    )
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"session": {"limit_minutes": 10}, "interlude": {"frequency": 2}}))
    return catalog, config


def test_preview_prints_session_order(tmp_path):
    catalog, config = _write_fixture(tmp_path)

    result = runner.invoke(app, ["preview", "--catalog", str(catalog), "--config", str(config), "--seed", "1"])

    assert result.exit_code == 0, result.output
    lines = [line for line in result.output.splitlines() if line.strip()]
    types = [line.split()[1] for line in lines[1:-1]]
    assert types == ["intro", "video", "video", "interlude", "outro"]
    assert "5 items" in lines[-1]


def test_preview_json_output(tmp_path):
    catalog, config = _write_fixture(tmp_path)

    result = runner.invoke(
        app, ["preview", "--catalog", str(catalog), "--config", str(config), "--json", "--count", "3"]
    )

    assert result.exit_code == 0, result.output
    items = json.loads(result.output)
    assert len(items) == 3
    assert items[0]["media_type"] == "intro"


def test_preview_rejects_negative_limit(tmp_path):
    catalog, config = _write_fixture(tmp_path)

    result = runner.invoke(
        app, ["preview", "--catalog", str(catalog), "--config", str(config), "--limit-minutes=-5"]
    )

    assert result.exit_code == 1


def test_preview_does_not_rewrite_config(tmp_path):
    catalog, config = _write_fixture(tmp_path)
    before = config.read_text()

    runner.invoke(app, ["preview", "--catalog", str(catalog), "--config", str(config)])

    assert config.read_text() == before
