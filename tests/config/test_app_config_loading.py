import os
import sys
import tempfile
import textwrap
import unittest
from pathlib import Path
from unittest.mock import patch

from app_config import (
    CONFIG_ENV_VAR,
    AppConfigurationError,
    load_app_config,
    resolve_config_path,
)


def _write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


class AppConfigLoadingTests(unittest.TestCase):
    def test_load_app_config_reads_sections_and_resolves_paths(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            root = Path(temp_dir)
            config_path = root / "config.toml"
            _write_text(
                config_path,
                textwrap.dedent(
                    """
                    [timer]
                    title = "Thesis"
                    work_minutes = 25
                    short_break_minutes = 5
                    auto_start = true

                    [storage]
                    path = "data/pomodoro.json"

                    [sound]
                    enabled = false
                    output_device = 2
                    volume = 0.25

                    [ui_server]
                    port = 9000
                    index_file = "web/index.html"

                    [logging]
                    level = "debug"
                    """
                ).strip(),
            )

            app_config = load_app_config(str(config_path))

            self.assertEqual(str(config_path), app_config.source_file)
            self.assertEqual("Thesis", app_config.timer.title)
            self.assertEqual(25, app_config.timer.work_minutes)
            self.assertEqual(5, app_config.timer.short_break_minutes)
            self.assertEqual(10, app_config.timer.long_break_minutes)
            self.assertTrue(app_config.timer.auto_start)
            self.assertEqual(
                str((root / "data/pomodoro.json").resolve()),
                app_config.storage.path,
            )
            self.assertFalse(app_config.sound.enabled)
            self.assertEqual(2, app_config.sound.output_device)
            self.assertEqual(0.25, app_config.sound.volume)
            self.assertEqual(9000, app_config.ui_server.port)
            self.assertEqual(
                str((root / "web/index.html").resolve()),
                app_config.ui_server.index_file,
            )
            self.assertEqual("DEBUG", app_config.logging.level)

    def test_missing_default_config_uses_builtin_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as cwd_dir:
            with patch("app_config.Path.cwd", return_value=Path(cwd_dir)):
                app_config = load_app_config(environ={})

        self.assertEqual("", app_config.source_file)
        self.assertEqual(13, app_config.timer.work_minutes)
        self.assertTrue(app_config.ui_server.enabled)

    def test_missing_explicit_config_is_an_error(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            missing = Path(temp_dir) / "nope.toml"
            with self.assertRaises(AppConfigurationError):
                load_app_config(environ={CONFIG_ENV_VAR: str(missing)})

    def test_invalid_timer_settings_are_rejected(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            _write_text(config_path, "[timer]\nwork_minutes = 0\n")

            with self.assertRaises(AppConfigurationError) as context:
                load_app_config(str(config_path))

            self.assertIn("[timer]", str(context.exception))

    def test_invalid_values_name_the_offending_field(self) -> None:
        cases = {
            "[sound]\nvolume = 3\n": "sound.volume",
            "[ui_server]\nport = \"web\"\n": "ui_server.port",
            "[logging]\nlevel = \"LOUD\"\n": "logging.level",
            "timer = 5\n": "[timer]",
        }
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            for content, field in cases.items():
                with self.subTest(field=field):
                    _write_text(config_path, content)
                    with self.assertRaises(AppConfigurationError) as context:
                        load_app_config(str(config_path))
                    self.assertIn(field, str(context.exception))

    def test_malformed_toml_is_reported(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            _write_text(config_path, "[timer\n")

            with self.assertRaises(AppConfigurationError):
                load_app_config(str(config_path))

    def test_resolve_config_path_prefers_environment_variable(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "custom.toml"
            _write_text(config_path, "")

            resolved = resolve_config_path(environ={CONFIG_ENV_VAR: str(config_path)})

            self.assertEqual(config_path, resolved)

    def test_resolve_config_path_uses_bundled_config_in_frozen_mode(self) -> None:
        with tempfile.TemporaryDirectory() as cwd_dir, tempfile.TemporaryDirectory() as bundle_dir:
            bundled_config = Path(bundle_dir) / "config.toml"
            _write_text(bundled_config, "[timer]\nwork_minutes = 30\n")

            with patch.dict(os.environ, {}, clear=True):
                with patch("app_config.Path.cwd", return_value=Path(cwd_dir)):
                    with patch.object(sys, "_MEIPASS", bundle_dir, create=True):
                        resolved = resolve_config_path()

            self.assertEqual(bundled_config, resolved)


if __name__ == "__main__":
    unittest.main()
