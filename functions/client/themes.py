"""
Theme registry and applier.

Palettes map style variable names to color values. Applying a palette writes
each variable into the global style scope as a ``--<name>`` custom property,
updates the theme indicator, persists the selection and notifies listeners.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Iterable, Mapping, Optional

from client.notifications import NotificationQueue, Severity
from client.storage import LocalStorage, StorageError

logger = logging.getLogger(__name__)

THEME_STORAGE_KEY = "portfolio-theme"
DEFAULT_THEME = "dark"
THEME_NOTIFICATION_TIMEOUT_SECONDS = 2.0


@dataclass(frozen=True)
class Palette:
    theme_id: str
    display_name: str
    icon: str
    variables: Mapping[str, str]

    def __post_init__(self):
        object.__setattr__(self, "variables", MappingProxyType(dict(self.variables)))


DEFAULT_PALETTES = (
    Palette(
        theme_id="dark",
        display_name="Dark Futuristic",
        icon="fa-moon",
        variables={
            "primary": "#00f3ff",
            "secondary": "#ff00ff",
            "accent": "#00ff9d",
            "dark": "#0a0a14",
            "darker": "#050510",
            "glass": "rgba(255, 255, 255, 0.05)",
            "text": "#f0f0ff",
            "text-secondary": "rgba(240, 240, 255, 0.7)",
        },
    ),
    Palette(
        theme_id="light",
        display_name="Light Futuristic",
        icon="fa-sun",
        variables={
            "primary": "#0066cc",
            "secondary": "#cc00cc",
            "accent": "#00cc66",
            "dark": "#f0f0ff",
            "darker": "#ffffff",
            "glass": "rgba(0, 0, 0, 0.05)",
            "text": "#0a0a14",
            "text-secondary": "rgba(10, 10, 20, 0.7)",
        },
    ),
    Palette(
        theme_id="cyberpunk",
        display_name="Cyberpunk",
        icon="fa-robot",
        variables={
            "primary": "#ff00ff",
            "secondary": "#00ffff",
            "accent": "#ffff00",
            "dark": "#0a0a0a",
            "darker": "#000000",
            "glass": "rgba(255, 0, 255, 0.05)",
            "text": "#ffffff",
            "text-secondary": "rgba(255, 255, 255, 0.7)",
        },
    ),
    Palette(
        theme_id="matrix",
        display_name="Matrix",
        icon="fa-code",
        variables={
            "primary": "#00ff00",
            "secondary": "#00ff00",
            "accent": "#00ff00",
            "dark": "#000000",
            "darker": "#000000",
            "glass": "rgba(0, 255, 0, 0.05)",
            "text": "#00ff00",
            "text-secondary": "rgba(0, 255, 0, 0.7)",
        },
    ),
)


class ThemeRegistry:
    """Palettes in enumeration order, keyed by theme id."""

    def __init__(self, palettes: Iterable[Palette] = DEFAULT_PALETTES):
        self._palettes: dict[str, Palette] = {}
        for palette in palettes:
            if palette.theme_id in self._palettes:
                raise ValueError(f"Duplicate theme id: {palette.theme_id}")
            self._palettes[palette.theme_id] = palette
        if not self._palettes:
            raise ValueError("At least one palette is required")

    def __contains__(self, theme_id: object) -> bool:
        return theme_id in self._palettes

    def __len__(self) -> int:
        return len(self._palettes)

    def ids(self) -> list[str]:
        return list(self._palettes)

    def get(self, theme_id: str) -> Optional[Palette]:
        return self._palettes.get(theme_id)

    def next_after(self, theme_id: str) -> str:
        ids = self.ids()
        if theme_id not in self._palettes:
            return ids[0]
        return ids[(ids.index(theme_id) + 1) % len(ids)]


@dataclass
class StyleScope:
    """The document-wide style scope: custom properties plus the body class."""

    properties: dict[str, str] = field(default_factory=dict)
    body_class: str = ""

    def set_property(self, name: str, value: str) -> None:
        self.properties[name] = value

    def get_property(self, name: str) -> Optional[str]:
        return self.properties.get(name)


@dataclass
class ThemeIndicator:
    """State of the theme toggle button and its dropdown."""

    icon: str = "fa-palette"
    active_option: Optional[str] = None
    dropdown_open: bool = False

    def toggle_dropdown(self) -> None:
        self.dropdown_open = not self.dropdown_open

    def close_dropdown(self) -> None:
        self.dropdown_open = False


ThemeCallback = Callable[[Optional[str], str], None]


class ThemeSwitcher:
    """Owns the current theme selection and applies it."""

    def __init__(
        self,
        registry: ThemeRegistry,
        style: StyleScope,
        storage: LocalStorage,
        notifications: Optional[NotificationQueue] = None,
        indicator: Optional[ThemeIndicator] = None,
        default_theme: str = DEFAULT_THEME,
        notification_timeout: float = THEME_NOTIFICATION_TIMEOUT_SECONDS,
    ):
        if default_theme not in registry:
            raise ValueError(f"Unknown default theme: {default_theme}")
        self.registry = registry
        self.style = style
        self.storage = storage
        self.notifications = notifications
        self.indicator = indicator or ThemeIndicator()
        self.default_theme = default_theme
        self.notification_timeout = notification_timeout
        self.current_theme: Optional[str] = None
        self._callbacks: list[ThemeCallback] = []

    def register_theme_change_callback(self, callback: ThemeCallback) -> None:
        """Register a callback taking (old_theme, new_theme)."""
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def unregister_theme_change_callback(self, callback: ThemeCallback) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def load_saved_theme(self) -> str:
        saved = self.storage.get_item(THEME_STORAGE_KEY)
        if saved not in self.registry:
            if saved is not None:
                logger.warning("Invalid saved theme %r, using %s", saved, self.default_theme)
            saved = self.default_theme
        self.set_theme(saved)
        return saved

    def set_theme(self, theme_id: str) -> bool:
        """
        Apply a palette. Unknown ids are ignored.

        Returns True when the palette was applied.
        """
        palette = self.registry.get(theme_id)
        if palette is None:
            logger.debug("Ignoring unknown theme %r", theme_id)
            return False

        old_theme = self.current_theme
        self.current_theme = theme_id
        for name, value in palette.variables.items():
            self.style.set_property(f"--{name}", value)

        self._update_indicator(palette)
        self._save_preference(theme_id)
        self._notify_theme_change(old_theme, theme_id)
        if self.notifications is not None:
            self.notifications.notify(
                f"Theme changed to: {palette.display_name}",
                Severity.INFO,
                timeout=self.notification_timeout,
            )
        logger.info("Theme changed from %s to %s", old_theme, theme_id)
        return True

    def cycle_theme(self) -> str:
        next_theme = self.registry.next_after(self.current_theme or self.default_theme)
        self.set_theme(next_theme)
        return next_theme

    def select_option(self, theme_id: str) -> None:
        """Dropdown option click: apply the theme and close the dropdown."""
        self.set_theme(theme_id)
        self.indicator.close_dropdown()

    def handle_key(self, key: str, ctrl: bool = False, shift: bool = False) -> bool:
        """Ctrl+Shift+T cycles themes. Returns True when the key was handled."""
        if ctrl and shift and key.upper() == "T":
            self.cycle_theme()
            return True
        return False

    def _update_indicator(self, palette: Palette) -> None:
        self.indicator.icon = palette.icon
        self.indicator.active_option = palette.theme_id
        self.style.body_class = f"theme-{palette.theme_id}"

    def _save_preference(self, theme_id: str) -> None:
        try:
            self.storage.set_item(THEME_STORAGE_KEY, theme_id)
        except StorageError:
            logger.exception("Error saving theme preference")

    def _notify_theme_change(self, old_theme: Optional[str], new_theme: str) -> None:
        for callback in list(self._callbacks):
            try:
                callback(old_theme, new_theme)
            except Exception:
                logger.exception("Error in theme change callback %r", callback)
