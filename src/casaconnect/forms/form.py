"""Server-side model of an HTML edit form and the page that hosts it."""

from collections.abc import Callable, Mapping
from typing import Literal

FieldEvent = Literal["input", "change"]
FieldListener = Callable[[str], None]
Confirm = Callable[[str], bool]


class Form:
    """Named string fields with input/change listeners, in document order."""

    def __init__(self, name: str, fields: Mapping[str, str] | None = None) -> None:
        self.name = name
        self._fields: dict[str, str] = dict(fields or {})
        self._listeners: dict[FieldEvent, list[FieldListener]] = {"input": [], "change": []}

    def has_field(self, name: str) -> bool:
        return name in self._fields

    def get_value(self, name: str) -> str:
        return self._fields[name]

    def set_value(self, name: str, value: str, event: FieldEvent = "input") -> None:
        """Set a field as the user would, notifying listeners of `event`."""
        if name not in self._fields:
            raise KeyError(f"Form '{self.name}' has no field '{name}'")
        self._fields[name] = value
        for listener in list(self._listeners[event]):
            listener(name)

    def assign(self, name: str, value: str) -> None:
        """Set a field programmatically; no listeners fire."""
        if name not in self._fields:
            raise KeyError(f"Form '{self.name}' has no field '{name}'")
        self._fields[name] = value

    def add_listener(self, event: FieldEvent, listener: FieldListener) -> None:
        self._listeners[event].append(listener)

    def remove_listener(self, event: FieldEvent, listener: FieldListener) -> None:
        if listener in self._listeners[event]:
            self._listeners[event].remove(listener)

    def serialize(self) -> dict[str, str]:
        return dict(self._fields)


class BeforeNavigateEvent:
    def __init__(self) -> None:
        self.default_prevented = False
        self.return_value = ""

    def prevent_default(self) -> None:
        self.default_prevented = True


NavigateHandler = Callable[[BeforeNavigateEvent], None]


class Page:
    """A page view holding before-navigate interceptors."""

    def __init__(self) -> None:
        self._handlers: list[NavigateHandler] = []

    @property
    def handler_count(self) -> int:
        return len(self._handlers)

    def add_before_navigate(self, handler: NavigateHandler) -> None:
        self._handlers.append(handler)

    def remove_before_navigate(self, handler: NavigateHandler) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    def navigate(self, confirm: Confirm) -> bool:
        """Attempt to leave the page. Returns True if navigation proceeds.

        If any handler prevents the default, the user is asked to confirm
        with the handler's warning text.
        """
        event = BeforeNavigateEvent()
        for handler in list(self._handlers):
            handler(event)
        if not event.default_prevented:
            return True
        return confirm(event.return_value)
