from collections.abc import Callable

import structlog

from casaconnect.forms.api_client import ApiClient, ApiResponse
from casaconnect.forms.draft import AUTOSAVE_DELAY_SECONDS, FormDraftGuard, draft_key, snapshot_key
from casaconnect.forms.form import Confirm, Form, NavigateHandler, Page
from casaconnect.forms.notify import Notifier
from casaconnect.forms.storage import StorageHelper

logger = structlog.get_logger(__name__)


class EditFormController:
    """Edit page for one entity: draft guard, unsaved-changes guard and submit.

    All state is per instance and lives from mount() to unmount(). Collaborators
    are passed in; nothing is looked up globally.
    """

    def __init__(
        self,
        form_type: str,
        entity_id: str,
        form: Form,
        page: Page,
        storage: StorageHelper,
        api: ApiClient,
        notifier: Notifier,
        confirm: Confirm,
        success_message: str = "Changes saved successfully!",
        autosave_delay: float = AUTOSAVE_DELAY_SECONDS,
    ) -> None:
        self.form = form
        self.page = page
        self.api = api
        self.notifier = notifier
        self.confirm = confirm
        self.success_message = success_message
        self.guard = FormDraftGuard(
            form,
            storage,
            draft_key(form_type, entity_id),
            snapshot_key(form_type, entity_id),
            delay=autosave_delay,
        )
        self._detach_autosave: Callable[[], None] | None = None
        self._navigate_handler: NavigateHandler | None = None

    @property
    def mounted(self) -> bool:
        return self._detach_autosave is not None

    def mount(self) -> bool:
        """Wire the guards onto the freshly rendered form. Returns True if a draft was restored.

        The snapshot is taken before the draft is offered, so restored values
        count as unsaved changes.
        """
        if self.mounted:
            raise RuntimeError("Controller already mounted")
        self.guard.snapshot_original()
        self._detach_autosave = self.guard.attach_draft_autosave()
        restored = self.guard.load_draft(self.confirm)
        self._navigate_handler = self.guard.guard_unsaved_changes(self.page)
        return restored

    def unmount(self) -> None:
        if self._detach_autosave is not None:
            self._detach_autosave()
            self._detach_autosave = None
        if self._navigate_handler is not None:
            self.page.remove_before_navigate(self._navigate_handler)
            self._navigate_handler = None

    async def submit(self, path: str) -> ApiResponse:
        """Post the form. On success the draft is dropped and the guards come off."""
        response = await self.api.post(path, self.form.serialize())
        if response.success:
            # Detach first so a pending autosave cannot recreate the draft
            self.unmount()
            self.guard.clear_draft()
            self.notifier.success(self.success_message)
        else:
            logger.info("form_submit_failed", form=self.form.name, error=response.error)
            self.notifier.error(response.error or "Failed to save changes")
        return response
