"""Key bindings for the command prompt."""

from __future__ import annotations

from pydantic import Field, model_validator

from conflux.core.base import BaseConfig

# Always shows help, whatever the bindings say.
HELP_KEY = "?"


class KeyBinding(BaseConfig):
    """One character per command typed at the prompt.

    Several commands can be typed at once ("wwa" shows two more lines
    above, then keeps the local version).
    """

    select_local: str = Field(default="a", description="Use local version")
    select_incoming: str = Field(
        default="d", description="Use incoming version"
    )
    select_both: str = Field(
        default="b", description="Keep local then incoming version"
    )
    edit: str = Field(default="e", description="Edit conflict in $EDITOR")
    next: str = Field(default="n", description="Go to next conflict")
    previous: str = Field(default="p", description="Go to previous conflict")
    show_up: str = Field(default="w", description="Show one more line above")
    show_down: str = Field(
        default="s", description="Show one more line below"
    )
    scroll_up: str = Field(default="k", description="Scroll panes up")
    scroll_down: str = Field(default="j", description="Scroll panes down")
    toggle_view: str = Field(
        default="v", description="Toggle side-by-side / stacked panes"
    )
    help: str = Field(default="h", description="Show help")
    quit: str = Field(default="q", description="Quit")

    @model_validator(mode="after")
    def _check_keys(self) -> KeyBinding:
        seen: dict[str, str] = {}
        for action in self.__class__.model_fields:
            key = getattr(self, action)
            if len(key) != 1 or not key.isprintable() or key.isspace():
                raise ValueError(
                    f"binding for '{action}' must be a single printable "
                    f"character, got {key!r}"
                )
            if key == HELP_KEY:
                raise ValueError(f"'{HELP_KEY}' is reserved for help")
            if key in seen:
                raise ValueError(
                    f"'{key}' is bound to both '{seen[key]}' and '{action}'"
                )
            seen[key] = action
        return self

    def action_for(self, key: str) -> str | None:
        """Return the action bound to key, or None."""
        for action in self.__class__.model_fields:
            if getattr(self, action) == key:
                return action
        return None

    def describe(self) -> list[tuple[str, str]]:
        """(key, description) pairs in declaration order."""
        fields = self.__class__.model_fields
        return [
            (getattr(self, action), info.description or action)
            for action, info in fields.items()
        ]

    def prompt(self) -> str:
        return (
            f"[{self.show_up},{self.select_local},{self.show_down},"
            f"{self.select_incoming},{self.edit},{HELP_KEY}] >>"
        )
