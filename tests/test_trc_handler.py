import io
import json
import logging
import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest import mock

script_dir = Path(__file__).resolve().parent
project_root = script_dir.parent

sys.path.insert(0, str(project_root))
sys.path.insert(0, str(script_dir))

import trc_builder as tb
import console_logger
import trc_settings
from tr_handlers.factory import get_handler_for_data
from tr_handlers.trc.trc_handler import TrcHandler
from tr_utils.errors import InvalidDiscriminant, UnexpectedEof


class TestTrcHandler(unittest.TestCase):

    def test_factory_picks_trc_handler(self):
        handler = get_handler_for_data(tb.level(), settings=dict(trc_settings.DEFAULT_SETTINGS))
        self.assertIsInstance(handler, TrcHandler)
        self.assertFalse(handler.supports_editing())

    def test_factory_rejects_unknown_data(self):
        with self.assertRaises(ValueError):
            get_handler_for_data(b'\x00\x00\x00\x00')

    def test_read_emits_level_loaded(self):
        handler = TrcHandler(dict(trc_settings.DEFAULT_SETTINGS))
        received = []
        handler.level_loaded.connect(lambda level: received.append(level))
        handler.read(tb.level(counts=(0, 1, 0)))
        self.assertIsNotNone(handler.level)
        self.assertEqual(received, [handler.level])
        self.assertEqual(handler.level.num_obj_images, 1)

    def test_read_failure_is_logged_and_raised(self):
        handler = TrcHandler(dict(trc_settings.DEFAULT_SETTINGS))
        received = []
        handler.level_loaded.connect(lambda level: received.append(level))
        with self.assertLogs('tr_handlers.trc.trc_handler', level='ERROR'):
            with self.assertRaises(UnexpectedEof):
                handler.read(tb.level()[:20])
        self.assertIsNone(handler.level)
        self.assertEqual(received, [])

    def test_rebuild_not_supported(self):
        with self.assertRaises(NotImplementedError):
            TrcHandler({}).rebuild()


class TestSettings(unittest.TestCase):

    def test_defaults_when_missing(self):
        with tempfile.TemporaryDirectory() as tmp:
            settings = trc_settings.load_settings(os.path.join(tmp, "missing.json"))
        self.assertEqual(settings, trc_settings.DEFAULT_SETTINGS)

    def test_round_trip_fills_defaults(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "settings.json")
            trc_settings.save_settings({"strict_version": True}, path)
            with open(path) as f:
                self.assertEqual(json.load(f), {"strict_version": True})
            settings = trc_settings.load_settings(path)
        self.assertTrue(settings["strict_version"])
        self.assertEqual(settings["max_inflated_size"], trc_settings.DEFAULT_SETTINGS["max_inflated_size"])

    def test_invalid_json_falls_back(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "settings.json")
            with open(path, "w") as f:
                f.write("{not json")
            settings = trc_settings.load_settings(path)
        self.assertEqual(settings, trc_settings.DEFAULT_SETTINGS)

    def test_handler_uses_settings(self):
        handler = TrcHandler({"strict_version": True})
        with self.assertRaises(InvalidDiscriminant):
            handler.read(tb.level(version=1))


class TestConsoleLogging(unittest.TestCase):

    def setUp(self):
        self.saved_level = logging.getLogger().level

    def tearDown(self):
        root = logging.getLogger()
        root.setLevel(self.saved_level)
        for h in root.handlers[:]:
            if isinstance(h, console_logger.ConsoleHandler):
                root.removeHandler(h)

    def test_setup_is_idempotent(self):
        stream = io.StringIO()
        console_logger.setup_console_logging(stream, level="DEBUG")
        console_logger.setup_console_logging(stream, level="INFO")
        root = logging.getLogger()
        installed = [h for h in root.handlers if isinstance(h, console_logger.ConsoleHandler)]
        self.assertEqual(len(installed), 1)
        self.assertEqual(root.level, logging.INFO)
        logging.getLogger("tr_handlers.trc").info("hello")
        self.assertIn("INFO - hello", stream.getvalue())

    def test_handler_applies_saved_log_level(self):
        saved = dict(trc_settings.DEFAULT_SETTINGS, log_level="DEBUG")
        with mock.patch.object(trc_settings, "load_settings", return_value=saved):
            handler = TrcHandler()
        self.assertEqual(handler.settings["log_level"], "DEBUG")
        root = logging.getLogger()
        self.assertEqual(root.level, logging.DEBUG)
        self.assertEqual(len([h for h in root.handlers if isinstance(h, console_logger.ConsoleHandler)]), 1)

    def test_explicit_settings_leave_logging_alone(self):
        TrcHandler(dict(trc_settings.DEFAULT_SETTINGS, log_level="DEBUG"))
        root = logging.getLogger()
        self.assertFalse(any(isinstance(h, console_logger.ConsoleHandler) for h in root.handlers))


if __name__ == "__main__":
    unittest.main(verbosity=2)
