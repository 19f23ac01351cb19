import unittest
from pathlib import Path

from attendtrack.config import DEFAULT_MODEL, DEFAULT_USER, Settings, default_data_dir


class TestSettings(unittest.TestCase):
    def test_defaults_from_empty_environment(self) -> None:
        s = Settings.from_env({})
        self.assertEqual(s.data_dir, default_data_dir())
        self.assertEqual(s.user_id, DEFAULT_USER)
        self.assertEqual(s.model, DEFAULT_MODEL)
        self.assertIsNone(s.api_key)
        self.assertFalse(s.uses_github)

    def test_reads_environment(self) -> None:
        s = Settings.from_env(
            {
                "ATTENDTRACK_DATA_DIR": "/tmp/at",
                "ATTENDTRACK_USER": "alice",
                "API_KEY": "k2",
                "GITHUB_TOKEN": "t",
                "GITHUB_OWNER": "o",
                "GITHUB_REPO": "r",
            }
        )
        self.assertEqual(s.data_dir, Path("/tmp/at"))
        self.assertEqual(s.user_id, "alice")
        self.assertEqual(s.api_key, "k2")
        self.assertTrue(s.uses_github)

    def test_gemini_key_wins_and_blank_values_ignored(self) -> None:
        s = Settings.from_env({"GEMINI_API_KEY": "k1", "API_KEY": "k2", "ATTENDTRACK_USER": "  "})
        self.assertEqual(s.api_key, "k1")
        self.assertEqual(s.user_id, DEFAULT_USER)


if __name__ == "__main__":
    unittest.main()
