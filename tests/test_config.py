import json
import tempfile
import unittest
from unittest import mock
from pathlib import Path

from correlation_tuner.audio.detection_service import NoteDetectionService
from correlation_tuner.audio.pitch_detector import PitchDetector
from correlation_tuner.core.config import ConfigManager, DetectorSettings, WindowingSettings
from correlation_tuner.core.factory import ComponentFactory
from correlation_tuner.errors import InvalidConfiguration
from correlation_tuner.mock_audio_input import MockAudioInput


class TestConfigManager(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.config_dir = Path(self.tmp.name)

    def tearDown(self):
        self.tmp.cleanup()

    def test_defaults_are_written(self):
        manager = ConfigManager(self.tmp.name)
        for name in ("detector", "windowing", "audio_input"):
            self.assertTrue((self.config_dir / f"{name}.json").exists())

        detector = manager.get_config("detector")
        self.assertEqual(detector["base_frequency_hz"], 65.41)
        self.assertEqual(detector["semitone_count"], 30)
        self.assertEqual(detector["confidence_threshold"], 10.0)
        self.assertEqual(manager.get_config("windowing")["window_duration_ms"], 100.0)

    def test_saved_values_are_reloaded(self):
        manager = ConfigManager(self.tmp.name)
        self.assertTrue(manager.update_config("detector", {"confidence_threshold": 20.0}))

        reloaded = ConfigManager(self.tmp.name)
        self.assertEqual(reloaded.detector_settings().confidence_threshold, 20.0)
        # Keys missing from the file are filled in from the defaults
        self.assertEqual(reloaded.detector_settings().semitone_count, 30)

    def test_missing_keys_are_filled_in(self):
        (self.config_dir / "detector.json").write_text(json.dumps({"semitone_count": 12}))
        settings = ConfigManager(self.tmp.name).detector_settings()
        self.assertEqual(settings.semitone_count, 12)
        self.assertEqual(settings.base_frequency_hz, 65.41)

    def test_unreadable_file_falls_back_to_defaults(self):
        (self.config_dir / "detector.json").write_text("{not json")
        (self.config_dir / "windowing.json").write_text("[1, 2, 3]")
        manager = ConfigManager(self.tmp.name)
        self.assertEqual(manager.detector_settings(), DetectorSettings())
        self.assertEqual(manager.windowing_settings(), WindowingSettings())

    def test_get_config_returns_a_copy(self):
        manager = ConfigManager(self.tmp.name)
        manager.get_config("detector")["semitone_count"] = 1
        self.assertEqual(manager.get_config("detector")["semitone_count"], 30)

    def test_reset_config(self):
        manager = ConfigManager(self.tmp.name)
        manager.update_config("windowing", {"process_interval_ms": 500})
        self.assertTrue(manager.reset_config("windowing"))
        self.assertEqual(manager.windowing_settings().process_interval_ms, 250.0)

        saved = json.loads((self.config_dir / "windowing.json").read_text())
        self.assertEqual(saved["process_interval_ms"], 250.0)

    def test_unknown_configuration(self):
        manager = ConfigManager(self.tmp.name)
        self.assertFalse(manager.update_config("display", {"color": True}))
        self.assertFalse(manager.reset_config("display"))
        self.assertEqual(manager.get_config("display"), {})


class TestSettings(unittest.TestCase):
    def test_detector_settings_from_config(self):
        settings = DetectorSettings.from_config(
            {"base_frequency_hz": "110", "semitone_count": 12.0, "extra": "ignored"}
        )
        self.assertEqual(settings.base_frequency_hz, 110.0)
        self.assertEqual(settings.semitone_count, 12)
        self.assertIsInstance(settings.semitone_count, int)

    def test_invalid_detector_settings(self):
        invalid = [
            {"base_frequency_hz": 0},
            {"base_frequency_hz": "low"},
            {"semitone_count": 0},
            {"semitone_count": 2.5},
            {"semitone_count": True},
            {"confidence_threshold": -1},
            {"micro_step": None},
        ]
        for config in invalid:
            with self.subTest(config=config):
                with self.assertRaises(InvalidConfiguration):
                    DetectorSettings.from_config(config)

    def test_invalid_windowing_settings(self):
        with self.assertRaises(InvalidConfiguration):
            WindowingSettings.from_config({"window_duration_ms": 0})
        with self.assertRaises(InvalidConfiguration):
            WindowingSettings.from_config({"process_interval_ms": -5})
        self.assertEqual(
            WindowingSettings.from_config({"process_interval_ms": 0}).process_interval_ms, 0.0
        )


class RecordingAudioInput(MockAudioInput):
    def __init__(self, **options):
        super().__init__(sample_rate=options.get("sample_rate", 48000))
        self.options = options


class TestComponentFactory(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.factory = ComponentFactory(ConfigManager(self.tmp.name))

    def tearDown(self):
        self.tmp.cleanup()

    def test_create_pitch_detector(self):
        detector = self.factory.create_pitch_detector()
        self.assertIsInstance(detector, PitchDetector)
        self.assertEqual(len(detector.table), 90)

    def test_overrides(self):
        detector = self.factory.create_pitch_detector(
            semitone_count=12, confidence_threshold=None
        )
        self.assertEqual(len(detector.table), 36)
        self.assertEqual(detector.confidence_threshold, 10.0)

    def test_invalid_configuration_is_reported(self):
        self.factory.config_manager.update_config("detector", {"semitone_count": 0})
        with self.assertRaises(InvalidConfiguration):
            self.factory.create_pitch_detector()

    def test_unknown_implementation(self):
        with self.assertRaises(ValueError):
            self.factory.create_pitch_detector("yin")
        with self.assertRaises(ValueError):
            self.factory.create_note_detection_service("threaded")

    def test_audio_input_ignores_unknown_options(self):
        self.factory.config_manager.update_config(
            "audio_input", {"sample_rate": 44100, "latency": "low"}
        )
        with mock.patch(
            "correlation_tuner.core.factory._sound_device_input_class",
            return_value=RecordingAudioInput,
        ):
            audio_input = self.factory.create_audio_input(device_id=3, channels=None)

        self.assertEqual(
            audio_input.options,
            {"sample_rate": 44100, "frames_per_buffer": 1024, "channels": 1, "device_id": 3},
        )

    def test_create_note_detection_service(self):
        service = self.factory.create_note_detection_service(
            audio_input=MockAudioInput(), process_interval_ms=125
        )
        self.assertIsInstance(service, NoteDetectionService)
        self.assertIsInstance(service.detector, PitchDetector)
        self.assertFalse(service.is_running())


if __name__ == "__main__":
    unittest.main()
