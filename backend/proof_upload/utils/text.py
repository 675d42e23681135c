"""Text utilities: filename extensions and description fields."""

import os
from typing import Optional


def file_extension(filename: Optional[str]) -> str:
    """Return the last extension of ``filename`` including the dot.

    - Case is preserved
    - Dotfiles such as ``.png`` have no extension
    - Directory components from the client are ignored
    """

    if not filename:
        return ""
    base = os.path.basename(filename.replace("\\", "/"))
    return os.path.splitext(base)[1]


def or_placeholder(value: Optional[str], placeholder: str = "None") -> str:
    return value if value else placeholder
