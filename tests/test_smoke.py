"""
Smoke tests for the package surface: entry points, version and log setup.
"""
import logging
import tempfile
import unittest
from pathlib import Path


class TestSmoke(unittest.TestCase):
    def test_module_entry_uses_app_runner(self):
        """`python -m dockpanel` and the console script start the same runner."""
        import dockpanel.__main__
        import dockpanel.textual_app
        self.assertIs(dockpanel.__main__.run, dockpanel.textual_app.run)

    def test_version_is_set(self):
        import dockpanel
        self.assertRegex(dockpanel.__version__, r"^\d+\.\d+\.\d+$")

    def test_configure_logging_writes_rotating_file(self):
        from dockpanel import configure_logging
        root = logging.getLogger()
        previous_level = root.level
        with tempfile.TemporaryDirectory() as tmp:
            log_file = Path(tmp) / "dockpanel.log"
            handler = configure_logging("debug", str(log_file), max_size_mb=1, backup_count=2)
            try:
                self.assertEqual(handler.maxBytes, 1024 * 1024)
                self.assertEqual(handler.backupCount, 2)
                self.assertEqual(root.level, logging.DEBUG)
                logging.getLogger("dockpanel.test").info("engine client ready")
                handler.flush()
                self.assertIn("engine client ready", log_file.read_text())
            finally:
                root.removeHandler(handler)
                handler.close()
                root.setLevel(previous_level)


if __name__ == '__main__':
    unittest.main()
