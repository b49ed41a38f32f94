"""
Editor workflow for creating and editing a single user.

States
------
- Idle: no form is shown.
- FormOpen: the form is shown with a draft, in create or edit mode.
- Submitting: the draft has been handed to the remote store and the
  workflow waits for the outcome.

Transitions
-----------
=============  ===========  ============================================
From           Trigger      To
=============  ===========  ============================================
Idle           open_create  FormOpen(CREATE, blank draft)
Idle           open_edit    FormOpen(EDIT, draft of the selected record)
FormOpen       change       FormOpen(same mode, updated draft)
FormOpen       submit       Submitting (all required fields present)
FormOpen       cancel       Idle
Submitting     succeed      Idle
Submitting     fail         FormOpen(same mode, same draft)
=============  ===========  ============================================

Anything else raises IllegalTransitionError. A submit with a missing field
raises InvalidUserError and leaves the form open.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Union

from .data_models import PendingId, User, UserDraft, UserId
from .errors import IllegalTransitionError


class FormMode(str, Enum):
    """Whether the form creates a new record or replaces an existing one."""

    CREATE = "create"
    EDIT = "edit"


def _check_target(mode: FormMode, target_id: UserId | None) -> None:
    if mode is FormMode.EDIT and not target_id:
        raise IllegalTransitionError("An edit form needs the id of the record being edited.")
    if mode is FormMode.CREATE and target_id is not None:
        raise IllegalTransitionError("A create form must not target an existing record.")


@dataclass(frozen=True, slots=True)
class Idle:
    """No form is open."""


@dataclass(frozen=True, slots=True)
class FormOpen:
    """
    The form is open.

    Attributes
    ----------
    mode:
        CREATE or EDIT.
    draft:
        Current field values.
    target_id:
        Record being edited; None in create mode.
    """

    mode: FormMode
    draft: UserDraft
    target_id: UserId | None = None

    def __post_init__(self) -> None:
        _check_target(self.mode, self.target_id)


@dataclass(frozen=True, slots=True)
class Submitting:
    """
    A validated draft is in flight.

    Attributes
    ----------
    mode:
        CREATE or EDIT.
    draft:
        The submitted field values.
    target_id:
        Record being replaced; None in create mode.
    pending_id:
        Correlation handle for an in-flight create; None in edit mode.
    """

    mode: FormMode
    draft: UserDraft
    target_id: UserId | None = None
    pending_id: PendingId | None = None

    def __post_init__(self) -> None:
        _check_target(self.mode, self.target_id)
        if self.mode is FormMode.CREATE and self.pending_id is None:
            raise IllegalTransitionError("A create submission needs a pending id.")
        if self.mode is FormMode.EDIT and self.pending_id is not None:
            raise IllegalTransitionError("An edit submission must not carry a pending id.")

    def reopen(self) -> FormOpen:
        return FormOpen(mode=self.mode, draft=self.draft, target_id=self.target_id)


EditorState = Union[Idle, FormOpen, Submitting]


class EditorWorkflow:
    """
    Holder for the current editor state.

    Parameters
    ----------
    pending_ids:
        Factory for create correlation handles. Tests pass a deterministic one.
    """

    def __init__(self, pending_ids: Callable[[], PendingId] = PendingId.new) -> None:
        self._state: EditorState = Idle()
        self._pending_ids = pending_ids

    @property
    def state(self) -> EditorState:
        return self._state

    @property
    def is_form_visible(self) -> bool:
        return not isinstance(self._state, Idle)

    def _require(self, kind: type, trigger: str) -> None:
        if not isinstance(self._state, kind):
            raise IllegalTransitionError(
                f"Cannot {trigger} while {type(self._state).__name__}."
            )

    def open_create(self) -> FormOpen:
        self._require(Idle, "open the add form")
        self._state = FormOpen(mode=FormMode.CREATE, draft=UserDraft.blank())
        return self._state

    def open_edit(self, user: User) -> FormOpen:
        self._require(Idle, "open the edit form")
        self._state = FormOpen(mode=FormMode.EDIT, draft=user.draft, target_id=user.id)
        return self._state

    def change(self, **fields: str) -> FormOpen:
        """Replace one or more draft fields."""
        self._require(FormOpen, "edit the form")
        state = self._state
        assert isinstance(state, FormOpen)
        self._state = FormOpen(
            mode=state.mode,
            draft=state.draft.replace(**fields),
            target_id=state.target_id,
        )
        return self._state

    def submit(self) -> Submitting:
        """
        Move a complete draft into flight.

        Raises
        ------
        InvalidUserError
            If a required field is empty. The form stays open.
        """
        self._require(FormOpen, "submit")
        state = self._state
        assert isinstance(state, FormOpen)
        state.draft.validate()

        pending_id = self._pending_ids() if state.mode is FormMode.CREATE else None
        self._state = Submitting(
            mode=state.mode,
            draft=state.draft,
            target_id=state.target_id,
            pending_id=pending_id,
        )
        return self._state

    def succeed(self) -> Idle:
        self._require(Submitting, "complete a submission")
        self._state = Idle()
        return self._state

    def fail(self) -> FormOpen:
        """Return to the open form with the submitted draft intact."""
        self._require(Submitting, "fail a submission")
        state = self._state
        assert isinstance(state, Submitting)
        self._state = state.reopen()
        return self._state

    def cancel(self) -> Idle:
        self._require(FormOpen, "cancel")
        self._state = Idle()
        return self._state
