import unittest

from client.notifications import NotificationQueue, Severity
from client.scheduler import ManualScheduler
from client.storage import InMemoryLocalStorage
from client.themes import (
    DEFAULT_PALETTES,
    THEME_STORAGE_KEY,
    Palette,
    StyleScope,
    ThemeRegistry,
    ThemeSwitcher,
)


class ThemeRegistryTests(unittest.TestCase):
    def test_ids_follow_enumeration_order(self):
        registry = ThemeRegistry()
        self.assertEqual(registry.ids(), ["dark", "light", "cyberpunk", "matrix"])

    def test_next_after_wraps(self):
        registry = ThemeRegistry()
        self.assertEqual(registry.next_after("dark"), "light")
        self.assertEqual(registry.next_after("matrix"), "dark")

    def test_duplicate_ids_rejected(self):
        with self.assertRaises(ValueError):
            ThemeRegistry([DEFAULT_PALETTES[0], DEFAULT_PALETTES[0]])

    def test_palette_variables_are_read_only(self):
        palette = Palette("x", "X", "fa-x", {"primary": "#000"})
        with self.assertRaises(TypeError):
            palette.variables["primary"] = "#fff"


class ThemeSwitcherTests(unittest.TestCase):
    def setUp(self):
        self.scheduler = ManualScheduler()
        self.notifications = NotificationQueue(self.scheduler)
        self.storage = InMemoryLocalStorage()
        self.style = StyleScope()
        self.switcher = ThemeSwitcher(
            ThemeRegistry(), self.style, self.storage, notifications=self.notifications
        )

    def test_every_palette_applies_all_variables(self):
        for palette in DEFAULT_PALETTES:
            with self.subTest(theme=palette.theme_id):
                self.assertTrue(self.switcher.set_theme(palette.theme_id))
                for name, value in palette.variables.items():
                    self.assertEqual(self.style.get_property(f"--{name}"), value)
                self.assertEqual(self.switcher.current_theme, palette.theme_id)
                self.assertEqual(self.style.body_class, f"theme-{palette.theme_id}")
                self.assertEqual(self.switcher.indicator.icon, palette.icon)
                self.assertEqual(self.switcher.indicator.active_option, palette.theme_id)
                self.assertEqual(self.storage.get_item(THEME_STORAGE_KEY), palette.theme_id)

    def test_unknown_theme_is_ignored(self):
        self.switcher.set_theme("light")
        before = dict(self.style.properties)
        calls = []
        self.switcher.register_theme_change_callback(lambda old, new: calls.append(new))

        self.assertFalse(self.switcher.set_theme("solarized"))

        self.assertEqual(self.switcher.current_theme, "light")
        self.assertEqual(self.style.properties, before)
        self.assertEqual(self.storage.get_item(THEME_STORAGE_KEY), "light")
        self.assertEqual(calls, [])

    def test_change_callbacks_receive_old_and_new(self):
        calls = []
        self.switcher.register_theme_change_callback(lambda old, new: calls.append((old, new)))
        self.switcher.set_theme("dark")
        self.switcher.set_theme("matrix")
        self.assertEqual(calls, [(None, "dark"), ("dark", "matrix")])

    def test_failing_callback_does_not_block_others(self):
        calls = []

        def broken(old, new):
            raise RuntimeError("boom")

        self.switcher.register_theme_change_callback(broken)
        self.switcher.register_theme_change_callback(lambda old, new: calls.append(new))
        self.switcher.set_theme("cyberpunk")
        self.assertEqual(calls, ["cyberpunk"])

    def test_theme_change_shows_transient_notification(self):
        self.switcher.set_theme("light")
        current = self.notifications.current
        self.assertEqual(current.message, "Theme changed to: Light Futuristic")
        self.assertEqual(current.severity, Severity.INFO)
        self.scheduler.advance(2.0)
        self.assertIsNone(self.notifications.current)

    def test_cycle_theme_wraps(self):
        self.switcher.set_theme("cyberpunk")
        self.assertEqual(self.switcher.cycle_theme(), "matrix")
        self.assertEqual(self.switcher.cycle_theme(), "dark")
        self.assertEqual(self.switcher.current_theme, "dark")

    def test_keyboard_shortcut_cycles(self):
        self.switcher.set_theme("dark")
        self.assertFalse(self.switcher.handle_key("T", ctrl=True))
        self.assertEqual(self.switcher.current_theme, "dark")
        self.assertTrue(self.switcher.handle_key("T", ctrl=True, shift=True))
        self.assertEqual(self.switcher.current_theme, "light")

    def test_select_option_closes_dropdown(self):
        self.switcher.indicator.toggle_dropdown()
        self.assertTrue(self.switcher.indicator.dropdown_open)
        self.switcher.select_option("matrix")
        self.assertEqual(self.switcher.current_theme, "matrix")
        self.assertFalse(self.switcher.indicator.dropdown_open)

    def test_load_saved_theme_restores_selection(self):
        self.storage.set_item(THEME_STORAGE_KEY, "cyberpunk")
        self.assertEqual(self.switcher.load_saved_theme(), "cyberpunk")
        self.assertEqual(self.style.get_property("--primary"), "#ff00ff")

    def test_load_saved_theme_defaults(self):
        self.assertEqual(self.switcher.load_saved_theme(), "dark")
        self.storage.set_item(THEME_STORAGE_KEY, "vaporwave")
        self.assertEqual(self.switcher.load_saved_theme(), "dark")
        self.assertEqual(self.storage.get_item(THEME_STORAGE_KEY), "dark")


if __name__ == "__main__":
    unittest.main()
