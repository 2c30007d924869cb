"""
Content sources handed to a page: read-only for visitors, editable for admins.
"""
from typing import Callable, Optional


class ReadOnlySource:
    editable = False

    def __init__(self, translate: Callable[..., str]):
        self._translate = translate

    def text(self, key: str, default: Optional[str] = None) -> str:
        return self._translate(key, default)


class EditableSource(ReadOnlySource):
    """Adds edit/open_editor on top of text lookups."""

    editable = True

    def __init__(self, translate, edit: Callable[[str, str], object], open_editor: Callable[[str], object]):
        super().__init__(translate)
        self._edit = edit
        self._open_editor = open_editor

    def edit(self, key: str, value: str):
        return self._edit(key, value)

    def open_editor(self, key: str):
        return self._open_editor(key)


def select_content_source(is_admin, translate, edit=None, open_editor=None):
    """Pick the source for one page mount."""
    if is_admin:
        if edit is None or open_editor is None:
            raise ValueError("An editable source needs edit and open_editor callables")
        return EditableSource(translate, edit, open_editor)
    return ReadOnlySource(translate)
