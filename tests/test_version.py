import importlib.metadata
import unittest

import schema_tui


class VersionTests(unittest.TestCase):
    def test_version_matches_metadata(self) -> None:
        meta_version = importlib.metadata.version("schema-tui")
        self.assertEqual(schema_tui.__version__, meta_version)


if __name__ == "__main__":
    unittest.main()
