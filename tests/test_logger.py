import io
import logging
import unittest

from territory.utils.logger import configure_logging, get_logger, resolve_level


class LoggerTests(unittest.TestCase):
    def tearDown(self) -> None:
        configure_logging(logging.WARNING)

    def test_resolve_level_accepts_names(self) -> None:
        self.assertEqual(resolve_level("debug"), logging.DEBUG)
        self.assertEqual(resolve_level(" Error "), logging.ERROR)
        self.assertEqual(resolve_level(logging.INFO), logging.INFO)

    def test_unknown_level_falls_back(self) -> None:
        self.assertEqual(resolve_level("chatty"), logging.WARNING)
        self.assertEqual(resolve_level("chatty", default=logging.INFO), logging.INFO)

    def test_configure_installs_single_handler(self) -> None:
        stream = io.StringIO()
        configure_logging("INFO", stream=stream)
        configure_logging("INFO", stream=stream)
        self.assertEqual(len(logging.getLogger().handlers), 1)
        get_logger("territory.test").info("placed %s sources", 3)
        self.assertIn("| INFO    | territory.test | placed 3 sources", stream.getvalue())

    def test_default_namespace(self) -> None:
        self.assertEqual(get_logger().name, "territory")


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
