from __future__ import annotations

import json

import pytest

from toasttv.catalog.static_media_catalog import StaticMediaCatalog
from toasttv.domain.entities import MediaType
from toasttv.infra.exceptions import ValidationError
from toasttv.runtime.config import AppConfig, ConfigService, merge_config
from toasttv.runtime.providers import InMemoryRuntimeConfigStore, JsonRuntimeConfigStore


def test_app_config_defaults():
    config = AppConfig()

    assert config.session.limit_minutes == 30
    assert config.session.reset_hour == 6
    assert config.interlude.enabled is True
    assert config.interlude.frequency == 1
    assert config.logo.opacity == 128


def test_from_dict_ignores_unknown_keys_and_fills_defaults():
    config = AppConfig.from_dict({"session": {"limit_minutes": 45, "legacy": True}, "extra": {}})

    assert config.session.limit_minutes == 45
    assert config.session.reset_hour == 6
    assert config.interlude.frequency == 1


def test_merge_config_is_deep_and_non_destructive():
    base = {"session": {"limit_minutes": 30, "reset_hour": 6}}

    merged = merge_config(base, {"session": {"reset_hour": 7}})

    assert merged == {"session": {"limit_minutes": 30, "reset_hour": 7}}
    assert base["session"]["reset_hour"] == 6


def test_json_store_missing_file_uses_defaults(tmp_path):
    store = JsonRuntimeConfigStore(tmp_path / "config.json")

    assert store.get() == AppConfig()


def test_json_store_update_persists(tmp_path):
    path = tmp_path / "data" / "config.json"
    store = JsonRuntimeConfigStore(path)

    store.update({"interlude": {"frequency": 3}})

    on_disk = json.loads(path.read_text())
    assert on_disk["interlude"]["frequency"] == 3
    assert JsonRuntimeConfigStore(path).get().interlude.frequency == 3


def test_json_store_invalid_json_falls_back_to_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")

    assert JsonRuntimeConfigStore(path).get() == AppConfig()


def test_json_store_reload_picks_up_external_edit(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"session": {"limit_minutes": 10}}))
    store = JsonRuntimeConfigStore(path)
    assert store.get().session.limit_minutes == 10

    path.write_text(json.dumps({"session": {"limit_minutes": 20}}))
    store.reload()

    assert store.get().session.limit_minutes == 20


@pytest.mark.parametrize(
    "call",
    [
        lambda s: s.set_session_limit(-1),
        lambda s: s.set_reset_hour(24),
        lambda s: s.set_interlude_config(True, 0),
        lambda s: s.set_logo_config("/logo.png", 256, 6),
    ],
)
def test_config_service_rejects_invalid_values_without_mutation(call):
    store = InMemoryRuntimeConfigStore()
    service = ConfigService(store)

    with pytest.raises(ValidationError):
        call(service)

    assert store.get() == AppConfig()


def test_config_service_updates(tmp_path):
    service = ConfigService(InMemoryRuntimeConfigStore())

    service.set_session_limit(0)
    service.set_interlude_config(False, 4)
    service.disable_logo()

    config = service.get()
    assert config.session.limit_minutes == 0
    assert config.interlude.enabled is False
    assert config.interlude.frequency == 4
    assert config.logo.enabled is False


def test_discover_special_media_prefers_typed_items(item_factory):
    catalog = StaticMediaCatalog.from_items(
        [
            item_factory(1, 10, filename="show_intro.mp4"),
            item_factory(2, 10, MediaType.INTRO),
            item_factory(3, 10, MediaType.OUTRO),
            item_factory(4, 600, MediaType.OFFAIR),
        ]
    )
    service = ConfigService(InMemoryRuntimeConfigStore())

    service.discover_special_media(catalog)

    session = service.get().session
    assert (session.intro_video_id, session.outro_video_id, session.off_air_asset_id) == (2, 3, 4)


def test_discover_special_media_falls_back_to_filename_hints(item_factory):
    catalog = StaticMediaCatalog.from_items(
        [
            item_factory(1, 10, filename="toast_intro.mp4"),
            item_factory(2, 10, filename="toast_outro.mp4"),
            item_factory(3, 600, filename="bedtime_loop.mp4"),
            item_factory(4, 600, filename="episode.mp4"),
        ]
    )
    service = ConfigService(InMemoryRuntimeConfigStore())

    service.discover_special_media(catalog)

    session = service.get().session
    assert (session.intro_video_id, session.outro_video_id, session.off_air_asset_id) == (1, 2, 3)


def test_discover_special_media_keeps_existing_ids(item_factory):
    catalog = StaticMediaCatalog.from_items([item_factory(2, 10, MediaType.INTRO)])
    store = InMemoryRuntimeConfigStore()
    store.update({"session": {"intro_video_id": 99}})

    ConfigService(store).discover_special_media(catalog)

    assert store.get().session.intro_video_id == 99


@pytest.mark.parametrize(
    "partial",
    [
        {"interlude": {"enabled": True, "frequency": 0}},
        {"session": {"limit_minutes": -5}},
        {"session": {"reset_hour": 30}},
    ],
)
def test_generic_update_is_validated_like_the_setters(partial):
    store = InMemoryRuntimeConfigStore()
    service = ConfigService(store)

    with pytest.raises(ValidationError):
        service.update(partial)

    assert store.get() == AppConfig()


def test_json_store_rejects_invalid_update_without_writing(tmp_path):
    path = tmp_path / "config.json"
    store = JsonRuntimeConfigStore(path)
    store.update({"interlude": {"frequency": 2}})

    with pytest.raises(ValidationError):
        store.update({"interlude": {"frequency": 0}})

    assert store.get().interlude.frequency == 2
    assert json.loads(path.read_text())["interlude"]["frequency"] == 2


def test_json_store_hand_edited_invalid_values_fall_back_to_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"interlude": {"frequency": 0}, "session": {"limit_minutes": 10}}))

    assert JsonRuntimeConfigStore(path).get() == AppConfig()
