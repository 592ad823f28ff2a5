"""Pure text field editing.

A TextField is an immutable value plus cursor; ``apply_key`` returns the
edited copy. Unknown keys return the field unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from gitty.ui.types import NEWLINE_KEYS, KeyPressed


@dataclass(frozen=True, slots=True)
class TextField:
    value: str = ""
    cursor: int = 0
    multiline: bool = False
    placeholder: str = ""
    max_length: int | None = None

    @classmethod
    def create(
        cls,
        value: str = "",
        *,
        multiline: bool = False,
        placeholder: str = "",
        max_length: int | None = None,
    ) -> TextField:
        return cls(
            value=value,
            cursor=len(value),
            multiline=multiline,
            placeholder=placeholder,
            max_length=max_length,
        )

    @property
    def text(self) -> str:
        return self.value.strip()

    @property
    def is_blank(self) -> bool:
        return not self.text


def set_value(field: TextField, value: str) -> TextField:
    """Replace the content and move the cursor to the end."""
    return replace(field, value=value, cursor=len(value))


def insert(field: TextField, text: str) -> TextField:
    if not field.multiline:
        text = text.replace("\n", " ")
    if field.max_length is not None:
        room = field.max_length - len(field.value)
        if room <= 0:
            return field
        text = text[:room]
    value = field.value[: field.cursor] + text + field.value[field.cursor :]
    return replace(field, value=value, cursor=field.cursor + len(text))


def apply_key(field: TextField, key: KeyPressed) -> TextField:
    """Apply one editing key."""
    match key.key:
        case "backspace":
            if field.cursor == 0:
                return field
            value = field.value[: field.cursor - 1] + field.value[field.cursor :]
            return replace(field, value=value, cursor=field.cursor - 1)
        case "delete":
            if field.cursor >= len(field.value):
                return field
            value = field.value[: field.cursor] + field.value[field.cursor + 1 :]
            return replace(field, value=value)
        case "left":
            return replace(field, cursor=max(field.cursor - 1, 0))
        case "right":
            return replace(field, cursor=min(field.cursor + 1, len(field.value)))
        case "home" | "ctrl+a":
            return replace(field, cursor=0)
        case "end" | "ctrl+e":
            return replace(field, cursor=len(field.value))
        case "ctrl+u":
            return replace(field, value=field.value[field.cursor :], cursor=0)

    if key.key in NEWLINE_KEYS:
        return insert(field, "\n") if field.multiline else field

    if key.character is not None and len(key.character) == 1 and key.character.isprintable():
        return insert(field, key.character)

    return field


__all__ = ["TextField", "apply_key", "insert", "set_value"]
