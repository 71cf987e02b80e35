"""Draft autosave, draft recovery and the unsaved-changes guard for edit forms.

One FormDraftGuard serves one form of one entity. Its draft and snapshot keys
include both the form type and the entity id, so guards never share stored
state, and each guard owns its own autosave timer.
"""

from collections.abc import Callable

import structlog

from casaconnect.forms.debounce import Debouncer
from casaconnect.forms.form import BeforeNavigateEvent, Confirm, Form, NavigateHandler, Page
from casaconnect.forms.storage import StorageHelper

logger = structlog.get_logger(__name__)

AUTOSAVE_DELAY_SECONDS = 2.0
RESTORE_PROMPT = "A draft of your changes was found. Would you like to restore it?"
UNSAVED_CHANGES_WARNING = "You have unsaved changes. Are you sure you want to leave?"


def draft_key(form_type: str, entity_id: str) -> str:
    """e.g. draft_key("lease-edit", "L1") == "lease-edit-draft-L1"."""
    return f"{form_type}-draft-{entity_id}"


def snapshot_key(form_type: str, entity_id: str) -> str:
    return f"{form_type}-original-{entity_id}"


class FormDraftGuard:
    def __init__(
        self,
        form: Form,
        storage: StorageHelper,
        draft_key: str,
        snapshot_key: str,
        delay: float = AUTOSAVE_DELAY_SECONDS,
    ) -> None:
        self.form = form
        self.storage = storage
        self.draft_key = draft_key
        self.snapshot_key = snapshot_key
        self._autosave = Debouncer(self.save_draft, delay)

    @property
    def autosave_pending(self) -> bool:
        return self._autosave.pending

    def attach_draft_autosave(self) -> Callable[[], None]:
        """Save a draft 2s after the last input or change event.

        Returns a function that detaches the listeners and drops a pending save.
        """

        def on_edit(_field: str) -> None:
            self._autosave.trigger()

        self.form.add_listener("input", on_edit)
        self.form.add_listener("change", on_edit)

        def detach() -> None:
            self.form.remove_listener("input", on_edit)
            self.form.remove_listener("change", on_edit)
            self._autosave.cancel()

        return detach

    def save_draft(self) -> bool:
        saved = self.storage.set(self.draft_key, self.form.serialize())
        if saved:
            logger.debug("draft_saved", key=self.draft_key)
        return saved

    def load_draft(self, confirm: Confirm) -> bool:
        """Offer to restore a stored draft. Returns True if it was applied.

        The draft is removed whatever the answer, and so is an empty or
        unreadable one; fields the form no longer has are skipped.
        """
        draft = self.storage.get(self.draft_key)
        if not isinstance(draft, dict) or not draft:
            self.storage.remove(self.draft_key)
            return False

        applied = False
        try:
            if confirm(RESTORE_PROMPT):
                for name, value in draft.items():
                    if self.form.has_field(name):
                        self.form.assign(name, str(value))
                applied = True
        finally:
            self.storage.remove(self.draft_key)
        logger.info("draft_consumed", key=self.draft_key, restored=applied)
        return applied

    def clear_draft(self) -> None:
        self.storage.remove(self.draft_key)

    def snapshot_original(self) -> None:
        """Store the current values as the form's original state, replacing any earlier snapshot."""
        self.storage.set(self.snapshot_key, self.form.serialize())

    def is_dirty(self) -> bool:
        original = self.storage.get(self.snapshot_key)
        if not isinstance(original, dict):
            # Without a snapshot there is nothing to compare against
            return False
        return self.form.serialize() != original

    def guard_unsaved_changes(self, page: Page) -> NavigateHandler:
        """Block navigation away from a dirty form. Returns the handler for later removal."""

        def handler(event: BeforeNavigateEvent) -> None:
            if self.is_dirty():
                event.prevent_default()
                event.return_value = UNSAVED_CHANGES_WARNING

        page.add_before_navigate(handler)
        return handler
