from __future__ import annotations

import json
from pathlib import Path

import pytest

from roster_engine.data_models import User
from roster_engine.errors import MirrorReadError
from roster_engine.local_mirror import JsonFileMirror

ANN = User(id="1", name="Ann", username="ann", email="ann@x.io")
BEN = User(id="2", name="Ben", username="ben", email="ben@x.io")


def test_save_writes_json_array_of_all_records(mirror_path: Path) -> None:
    JsonFileMirror(mirror_path).save((ANN, BEN))

    payload = json.loads(mirror_path.read_text(encoding="utf-8"))
    assert payload == [ANN.to_dict(), BEN.to_dict()]


def test_save_overwrites_previous_snapshot(mirror_path: Path) -> None:
    mirror = JsonFileMirror(mirror_path)
    mirror.save((ANN, BEN))
    mirror.save((BEN,))

    assert mirror.load() == (BEN,)
    assert not mirror_path.with_suffix(".json.tmp").exists()


def test_load_missing_slot_returns_none(mirror_path: Path) -> None:
    assert JsonFileMirror(mirror_path).load() is None


def test_load_empty_array_returns_empty_tuple(mirror_path: Path) -> None:
    mirror = JsonFileMirror(mirror_path)
    mirror.save(())
    assert mirror.load() == ()


@pytest.mark.parametrize("text", ["not json", '{"id": 1}', '[{"name": "no id"}]'])
def test_load_unreadable_slot_raises(mirror_path: Path, text: str) -> None:
    mirror_path.parent.mkdir(parents=True, exist_ok=True)
    mirror_path.write_text(text, encoding="utf-8")

    with pytest.raises(MirrorReadError):
        JsonFileMirror(mirror_path).load()


def test_save_failure_propagates_and_keeps_previous_snapshot(
    mirror_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    mirror = JsonFileMirror(mirror_path)
    mirror.save((ANN,))
    before = mirror_path.read_bytes()

    def _boom(src: object, dst: object) -> None:
        raise PermissionError("read-only")

    monkeypatch.setattr("roster_engine.local_mirror.os.replace", _boom)

    with pytest.raises(OSError):
        mirror.save((ANN, BEN))

    assert mirror_path.read_bytes() == before
    assert not mirror_path.with_suffix(".json.tmp").exists()
