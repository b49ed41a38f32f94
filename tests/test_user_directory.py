from __future__ import annotations

from pathlib import Path
from typing import Sequence

import pytest

from roster_engine.data_models import PendingId, User, UserDraft
from roster_engine.directory import UserDirectory
from roster_engine.editor import EditorWorkflow, FormOpen, Idle
from roster_engine.errors import InvalidUserError
from roster_engine.local_mirror import JsonFileMirror, encode_records
from roster_engine.notifications import CollectingNotifier, NotificationLevel

CID = UserDraft(name="Cid", username="c", email="c@x.io")


def _directory(users_api, mirror_path: Path) -> tuple[UserDirectory, CollectingNotifier]:
    notifier = CollectingNotifier()
    directory = UserDirectory(
        store=users_api.store(), mirror=JsonFileMirror(mirror_path), notifier=notifier
    )
    return directory, notifier


def _loaded(users_api, mirror_path: Path) -> tuple[UserDirectory, CollectingNotifier]:
    directory, notifier = _directory(users_api, mirror_path)
    assert directory.load_initial().succeeded
    return directory, notifier


def _mirror_text(mirror_path: Path) -> str:
    return mirror_path.read_text(encoding="utf-8")


def test_load_initial_populates_records_and_mirror(users_api, mirror_path: Path) -> None:
    directory, notifier = _directory(users_api, mirror_path)

    result = directory.load_initial()

    assert result.succeeded
    assert [u.name for u in directory.records] == ["Ann", "Ben"]
    assert _mirror_text(mirror_path) == encode_records(directory.records)
    assert notifier.received == []


def test_create_appends_server_record_and_mirrors(users_api, mirror_path: Path) -> None:
    directory, notifier = _loaded(users_api, mirror_path)

    result = directory.create(CID)

    assert result.succeeded
    assert result.user == User(id="3", name="Cid", username="c", email="c@x.io")
    assert len(directory.records) == 3
    assert directory.records[-1].id == "3"
    assert [u.id for u in directory.records].count("3") == 1
    assert _mirror_text(mirror_path) == encode_records(directory.records)
    assert notifier.last is not None
    assert notifier.last.level is NotificationLevel.SUCCESS


def test_create_with_pending_id_still_uses_server_id(users_api, mirror_path: Path) -> None:
    directory, _ = _loaded(users_api, mirror_path)

    result = directory.create(CID, pending_id=PendingId("pending-abc"))

    assert result.user is not None
    assert result.user.id == "3"
    assert all(not u.id.startswith("pending-") for u in directory.records)


def test_create_returning_existing_id_replaces_in_place(users_api, mirror_path: Path) -> None:
    users_api.next_id = 2
    directory, _ = _loaded(users_api, mirror_path)

    directory.create(CID)

    assert [u.id for u in directory.records] == ["1", "2"]
    assert directory.records[1].name == "Cid"


def test_update_replaces_only_target(users_api, mirror_path: Path) -> None:
    directory, notifier = _loaded(users_api, mirror_path)
    ann_before = directory.records[0]

    result = directory.update("2", UserDraft(name="Benny", username="ben", email="b@x.io"))

    assert result.succeeded
    assert directory.records[0] == ann_before
    assert directory.records[1] == User(id="2", name="Benny", username="ben", email="b@x.io")
    assert _mirror_text(mirror_path) == encode_records(directory.records)
    assert notifier.last is not None and not notifier.last.is_error


def test_delete_removes_record(users_api, mirror_path: Path) -> None:
    directory, _ = _loaded(users_api, mirror_path)

    result = directory.delete("1")

    assert result.succeeded
    assert directory.find("1") is None
    assert [u.id for u in directory.records] == ["2"]
    assert _mirror_text(mirror_path) == encode_records(directory.records)


@pytest.mark.parametrize("operation", ["list", "create", "update", "delete"])
@pytest.mark.parametrize("mode", ["status", "transport"])
def test_failure_leaves_records_and_mirror_untouched(
    users_api, mirror_path: Path, operation: str, mode: str
) -> None:
    directory, notifier = _loaded(users_api, mirror_path)
    records_before = directory.records
    mirror_before = mirror_path.read_bytes()

    if mode == "status":
        users_api.fail_status[operation] = 503
    else:
        users_api.fail_transport.add(operation)

    calls = {
        "list": directory.refresh,
        "create": lambda: directory.create(CID),
        "update": lambda: directory.update("1", CID),
        "delete": lambda: directory.delete("1"),
    }
    result = calls[operation]()

    assert not result.succeeded
    assert result.operation == operation
    assert directory.records == records_before
    assert mirror_path.read_bytes() == mirror_before
    assert notifier.last is not None
    assert notifier.last.level is NotificationLevel.ERROR


def test_notification_fires_after_mirror_is_written(users_api, mirror_path: Path) -> None:
    seen: list[tuple[str, str]] = []

    class _MirrorCheckingNotifier:
        def notify(self, notification) -> None:
            seen.append((notification.message, mirror_path.read_text(encoding="utf-8")))

    directory = UserDirectory(
        store=users_api.store(),
        mirror=JsonFileMirror(mirror_path),
        notifier=_MirrorCheckingNotifier(),
    )
    directory.load_initial()
    directory.create(CID)

    (message, mirror_at_notify) = seen[-1]
    assert message == "User added successfully!"
    assert mirror_at_notify == encode_records(directory.records)


class _BrokenMirror:
    def save(self, records: Sequence[User]) -> None:
        raise OSError("disk full")

    def load(self) -> tuple[User, ...] | None:
        return None


def test_mirror_write_failure_propagates_without_success_notification(users_api) -> None:
    notifier = CollectingNotifier()
    directory = UserDirectory(store=users_api.store(), mirror=_BrokenMirror(), notifier=notifier)

    with pytest.raises(OSError):
        directory.load_initial()

    assert [u.id for u in directory.records] == ["1", "2"]
    assert notifier.received == []


def test_invalid_draft_is_rejected_before_any_request(users_api, mirror_path: Path) -> None:
    directory, _ = _loaded(users_api, mirror_path)
    sent = len(users_api.requests)

    with pytest.raises(InvalidUserError):
        directory.create(UserDraft(name="Cid", username="", email="c@x.io"))

    assert len(users_api.requests) == sent


def test_load_initial_falls_back_to_mirror(users_api, mirror_path: Path) -> None:
    directory, _ = _loaded(users_api, mirror_path)
    cached = directory.records
    mirror_before = mirror_path.read_bytes()

    users_api.fail_status["list"] = 500
    fresh, notifier = _directory(users_api, mirror_path)
    result = fresh.load_initial()

    assert not result.succeeded
    assert result.from_cache
    assert fresh.records == cached
    assert mirror_path.read_bytes() == mirror_before
    assert notifier.last is not None and notifier.last.is_error


def test_load_initial_without_mirror_reports_failure(users_api, mirror_path: Path) -> None:
    users_api.fail_transport.add("list")
    directory, notifier = _directory(users_api, mirror_path)

    result = directory.load_initial()

    assert not result.succeeded
    assert not result.from_cache
    assert directory.records == ()
    assert not mirror_path.exists()
    assert notifier.last is not None and notifier.last.message == "Failed to fetch users from API."


def test_refresh_failure_does_not_fall_back(users_api, mirror_path: Path) -> None:
    directory, _ = _loaded(users_api, mirror_path)
    directory.delete("1")
    users_api.fail_status["list"] = 500

    result = directory.refresh()

    assert not result.from_cache
    assert [u.id for u in directory.records] == ["2"]


def test_submit_create_success_returns_workflow_to_idle(users_api, mirror_path: Path) -> None:
    directory, _ = _loaded(users_api, mirror_path)
    workflow = EditorWorkflow(pending_ids=lambda: PendingId("pending-1"))
    workflow.open_create()
    workflow.change(name="Cid", username="c", email="c@x.io")

    result = directory.submit(workflow)

    assert result.succeeded
    assert isinstance(workflow.state, Idle)
    assert directory.records[-1].id == "3"


def test_submit_edit_failure_keeps_form_open_with_draft(users_api, mirror_path: Path) -> None:
    directory, _ = _loaded(users_api, mirror_path)
    users_api.fail_status["update"] = 500
    workflow = EditorWorkflow()
    workflow.open_edit(directory.records[0])
    workflow.change(name="Annie")

    result = directory.submit(workflow)

    assert not result.succeeded
    state = workflow.state
    assert isinstance(state, FormOpen)
    assert state.target_id == "1"
    assert state.draft.name == "Annie"
    assert directory.records[0].name == "Ann"


def test_submit_settles_workflow_when_mirror_write_fails(users_api) -> None:
    directory = UserDirectory(
        store=users_api.store(), mirror=_BrokenMirror(), notifier=CollectingNotifier()
    )
    with pytest.raises(OSError):
        directory.load_initial()
    workflow = EditorWorkflow(pending_ids=lambda: PendingId("pending-1"))
    workflow.open_create()
    workflow.change(name="Cid", username="c", email="c@x.io")

    with pytest.raises(OSError):
        directory.submit(workflow)

    assert isinstance(workflow.state, Idle)
    assert directory.records[-1].id == "3"
    assert isinstance(workflow.open_create(), FormOpen)


def test_submit_reopens_form_when_store_raises_unexpectedly(mirror_path: Path) -> None:
    class _ExplodingStore:
        def update(self, user_id: str, draft: UserDraft) -> User:
            raise KeyError(user_id)

    directory = UserDirectory(
        store=_ExplodingStore(), mirror=JsonFileMirror(mirror_path), notifier=CollectingNotifier()
    )
    workflow = EditorWorkflow()
    workflow.open_edit(User(id="1", name="Ann", username="ann", email="ann@x.io"))

    with pytest.raises(KeyError):
        directory.submit(workflow)

    assert isinstance(workflow.state, FormOpen)
    assert not mirror_path.exists()
