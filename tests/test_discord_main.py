import logging
import unittest

from discord_main import parse_log_level


class LogLevelTests(unittest.TestCase):
    def test_known_names_in_any_case(self):
        self.assertEqual(parse_log_level("DEBUG"), logging.DEBUG)
        self.assertEqual(parse_log_level("warning"), logging.WARNING)

    def test_unknown_name_is_rejected(self):
        with self.assertRaises(RuntimeError) as ctx:
            parse_log_level("LOUD")

        self.assertIn("LOUD", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
