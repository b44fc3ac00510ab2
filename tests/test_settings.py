from __future__ import annotations

from pathlib import Path

import pytest

from dispatchboard.config import load_settings
from dispatchboard.core.errors import ConfigError


def test_defaults(tmp_path: Path) -> None:
    settings = load_settings(env={})

    assert settings.slot_name == "dispatchData"
    assert settings.poll_interval_ms == 1000
    assert settings.approaching_seconds == 2700
    assert settings.columns_file is None


def test_yaml_then_environment(tmp_path: Path) -> None:
    config = tmp_path / "board.yaml"
    config.write_text(
        "data_root: {root}\nslot_name: shiftA\napproaching_seconds: 1800\ncolumns_file: columns.yaml\n".format(
            root=tmp_path / "data"
        ),
        encoding="utf-8",
    )
    (tmp_path / "columns.yaml").write_text("columns:\n  Time: time\n  Ref: id\n", encoding="utf-8")

    settings = load_settings(config, env={"DISPATCHBOARD_SLOT": "shiftB"})

    assert settings.root == (tmp_path / "data").resolve()
    assert settings.slot_name == "shiftB"
    assert settings.approaching_seconds == 1800
    assert settings.columns_file == tmp_path / "columns.yaml"
    assert settings.column_mapping().map_row({"Time": "06:00", "Ref": "Z1"}).id == "Z1"


def test_config_path_from_environment(tmp_path: Path) -> None:
    config = tmp_path / "board.yaml"
    config.write_text("poll_interval_ms: 500\n", encoding="utf-8")

    settings = load_settings(env={"DISPATCHBOARD_CONFIG": str(config)})

    assert settings.poll_interval_ms == 500


def test_missing_config_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_settings(tmp_path / "absent.yaml", env={})


def test_invalid_values_raise_config_error(tmp_path: Path) -> None:
    config = tmp_path / "board.yaml"
    config.write_text("poll_interval_ms: 0\nunknown_key: 1\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_settings(config, env={})


def test_missing_columns_file_raises_config_error(tmp_path: Path) -> None:
    settings = load_settings(env={"DISPATCHBOARD_COLUMNS_FILE": str(tmp_path / "none.yaml")})

    with pytest.raises(ConfigError):
        settings.column_mapping()


def test_open_store_restores_previous_state(tmp_path: Path) -> None:
    settings = load_settings(env={"DISPATCHBOARD_ROOT": str(tmp_path / "root")})
    settings.open_store().load([{"時間": "10:00", "編號": "K1"}])

    reopened = settings.open_store()

    assert [record.id for record in reopened.records] == ["K1"]
    assert (tmp_path / "root" / "store" / "dispatchData.json").exists()


def test_open_store_writes_only_under_configured_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    home = tmp_path / "home"
    monkeypatch.delenv("DISPATCHBOARD_ROOT", raising=False)
    monkeypatch.setenv("HOME", str(home))
    config = tmp_path / "board.yaml"
    config.write_text(f"data_root: {tmp_path / 'data'}\n", encoding="utf-8")

    store = load_settings(config, env={}).open_store()
    store.load([{"時間": "10:00", "編號": "K1"}])

    assert (tmp_path / "data" / "store" / "dispatchData.json").exists()
    assert (tmp_path / "data" / "logs" / "app.log").exists()
    assert not (home / "DispatchBoard").exists()
