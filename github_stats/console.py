"""Rich console pre-configured with the project's theme."""

from __future__ import annotations

from typing import Any

from rich.console import Console as RichConsole
from rich.theme import Theme

_default_theme = Theme(
    {
        "accent": "bold rgb(255,149,0)",
        "muted": "dim",
        "title": "bold rgb(120,200,255)",
        "repo": "bold italic rgb(191,160,255)",
        "label": "bold rgb(160,160,160)",
        "value": "rgb(240,240,240)",
        "success": "bold rgb(104,255,203)",
        "warning": "bold rgb(255,213,128)",
        "danger": "bold rgb(255,128,128)",
        "divider": "rgb(85,85,85)",
    }
)


class Console(RichConsole):
    """Rich console with a custom theme and a quiet switch."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:  # noqa: D401 - mirror rich API
        theme = kwargs.pop("theme", None) or _default_theme
        super().__init__(*args, theme=theme, **kwargs)
        self._quiet = False

    def set_quiet(self, quiet: bool) -> None:
        """Enable or disable quiet mode."""
        self._quiet = quiet

    def is_quiet(self) -> bool:
        """Check if quiet mode is enabled."""
        return self._quiet

    def print(self, *args: Any, **kwargs: Any) -> None:
        """Print with respect to quiet mode."""
        if not self._quiet:
            super().print(*args, **kwargs)


__all__ = ["Console"]
