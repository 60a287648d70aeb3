"""
Tests for sound file input, using WAV files generated on the fly.
"""

import os
import tempfile
import threading
import unittest

import numpy as np
import soundfile as sf

from correlation_tuner.audio.detection_service import NoteDetectionService
from correlation_tuner.audio.pitch_detector import PitchDetector
from correlation_tuner.audio.wav_input import WavFileAudioInput, read_windows

SAMPLE_RATE = 48000


def tone(frequency, seconds, sample_rate=SAMPLE_RATE, amplitude=0.5):
    t = np.arange(int(seconds * sample_rate)) / sample_rate
    return amplitude * np.sin(2 * np.pi * frequency * t)


class WavTestCase(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmp.cleanup()

    def write_wav(self, name, data, sample_rate=SAMPLE_RATE):
        path = os.path.join(self.tmp.name, name)
        sf.write(path, data, sample_rate)
        return path


class TestReadWindows(WavTestCase):
    def test_windows_of_a_one_second_tone(self):
        path = self.write_wav("a3.wav", tone(220.0, 1.0))
        windows = list(read_windows(path, window_duration_ms=100, hop_ms=250))

        self.assertEqual(len(windows), 4)
        self.assertEqual([w.timestamp for w in windows], [0.0, 0.25, 0.5, 0.75])
        detector = PitchDetector()
        for window in windows:
            self.assertEqual(len(window), 4800)
            self.assertEqual(window.sample_rate, SAMPLE_RATE)
            outcome = detector.process_window(window)
            self.assertEqual(outcome.candidate.scientific_name, "A3")

    def test_first_channel_of_a_stereo_file(self):
        stereo = np.column_stack((tone(196.0, 0.5), np.zeros(SAMPLE_RATE // 2)))
        path = self.write_wav("stereo.wav", stereo)
        windows = list(read_windows(path))

        self.assertTrue(all(w.samples.ndim == 1 for w in windows))
        outcome = PitchDetector().process_window(windows[0])
        self.assertEqual(outcome.candidate.scientific_name, "G3")

    def test_trailing_partial_window(self):
        path = self.write_wav("short.wav", np.zeros(1000), sample_rate=8000)
        windows = list(read_windows(path, window_duration_ms=100, hop_ms=100))
        self.assertEqual([len(w) for w in windows], [800, 200])

    def test_gain(self):
        path = self.write_wav("quiet.wav", tone(220.0, 0.1, amplitude=0.25))
        plain = next(read_windows(path))
        louder = next(read_windows(path, gain=2.0))
        np.testing.assert_allclose(louder.samples, 2 * plain.samples)

    def test_invalid_arguments(self):
        path = self.write_wav("a3.wav", tone(220.0, 0.1))
        with self.assertRaises(ValueError):
            list(read_windows(path, window_duration_ms=0))
        with self.assertRaises(ValueError):
            list(read_windows(path, hop_ms=-1))


class TestWavFileAudioInput(WavTestCase):
    def test_streams_blocks_with_media_time(self):
        path = self.write_wav("a3.wav", tone(220.0, 0.1, sample_rate=8000), sample_rate=8000)
        audio = WavFileAudioInput(path, chunk_size=200, realtime=False)
        self.assertEqual(audio.sample_rate, 8000)

        blocks = []
        audio.start(lambda block, timestamp: blocks.append((len(block), timestamp)))
        audio.join(5.0)

        self.assertFalse(audio.is_running())
        self.assertEqual([n for n, _ in blocks], [200, 200, 200, 200])
        self.assertEqual([ts for _, ts in blocks], [0.0, 0.025, 0.05, 0.075])

    def test_detection_service_on_a_file(self):
        path = self.write_wav("a3.wav", tone(220.0, 1.0))
        audio = WavFileAudioInput(path, realtime=False)
        service = NoteDetectionService(audio, PitchDetector())

        detected = []
        found = threading.Event()

        def on_note(analysis, elapsed):
            detected.append(analysis.outcome.candidate)
            found.set()

        service.events.on_note_detected(on_note)
        try:
            self.assertTrue(service.start())
            self.assertTrue(found.wait(5.0))
        finally:
            service.stop()

        self.assertEqual(detected[0].name, "A")
        self.assertEqual(detected[0].octave, 3)


if __name__ == "__main__":
    unittest.main()
