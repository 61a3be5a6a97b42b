import json
import unittest
import tempfile

from melody_echo.core.config import DEFAULT_SEQUENCE, ConfigManager


class TestConfigManager(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.config_dir = self._tmp.name

    def tearDown(self):
        self._tmp.cleanup()

    def test_defaults_written_on_first_use(self):
        manager = ConfigManager(self.config_dir)

        for name in ("exercise", "pitch_sampler", "synthesizer"):
            self.assertTrue((manager.config_dir / f"{name}.json").exists())

        exercise = manager.get_config("exercise")
        self.assertEqual(exercise["sequence"], DEFAULT_SEQUENCE)
        self.assertEqual(exercise["poll_interval"], 0.2)
        self.assertEqual(exercise["note_duration"], 0.4)
        self.assertEqual(exercise["note_gap"], 0.1)

    def test_missing_keys_are_back_filled(self):
        with open(f"{self.config_dir}/exercise.json", "w") as f:
            json.dump({"sequence": ["A/4"]}, f)

        exercise = ConfigManager(self.config_dir).get_config("exercise")
        self.assertEqual(exercise["sequence"], ["A/4"])
        self.assertEqual(exercise["poll_interval"], 0.2)

    def test_corrupt_file_falls_back_to_defaults(self):
        with open(f"{self.config_dir}/synthesizer.json", "w") as f:
            f.write("{not json")

        synth = ConfigManager(self.config_dir).get_config("synthesizer")
        self.assertEqual(synth["volume"], 0.3)

    def test_update_persists(self):
        manager = ConfigManager(self.config_dir)
        self.assertTrue(manager.update_config("pitch_sampler", {"device_id": 3}))

        reloaded = ConfigManager(self.config_dir)
        self.assertEqual(reloaded.get_config("pitch_sampler")["device_id"], 3)

    def test_reset(self):
        manager = ConfigManager(self.config_dir)
        manager.update_config("synthesizer", {"volume": 0.9})
        self.assertTrue(manager.reset_config("synthesizer"))
        self.assertEqual(manager.get_config("synthesizer")["volume"], 0.3)

    def test_unknown_section(self):
        manager = ConfigManager(self.config_dir)
        self.assertFalse(manager.update_config("nope", {}))
        self.assertFalse(manager.reset_config("nope"))
        self.assertEqual(manager.get_config("nope"), {})

    def test_get_config_returns_a_copy(self):
        manager = ConfigManager(self.config_dir)
        manager.get_config("synthesizer")["volume"] = 1.0
        self.assertEqual(manager.get_config("synthesizer")["volume"], 0.3)


if __name__ == "__main__":
    unittest.main()
