import unittest

import numpy as np

from correlation_tuner.audio.windowing import SampleWindowFeed


class TestSampleWindowFeed(unittest.TestCase):
    def setUp(self):
        self.windows = []
        # 1 kHz keeps the numbers small: 100 ms = 100 samples
        self.feed = SampleWindowFeed(
            1000, self.windows.append, window_duration_ms=100, process_interval_ms=250
        )

    def test_window_size(self):
        self.assertEqual(self.feed.window_size, 100)
        feed = SampleWindowFeed(48000, self.windows.append)
        self.assertEqual(feed.window_size, 4800)

    def test_waits_for_a_full_window(self):
        self.feed.push(np.ones(50), 0.0)
        self.assertEqual(self.windows, [])

        self.feed.push(np.ones(50), 0.0625)
        self.assertEqual(len(self.windows), 1)
        window = self.windows[0]
        self.assertEqual(len(window), 100)
        self.assertEqual(window.sample_rate, 1000)
        self.assertEqual(window.timestamp, 0.0625)

    def test_rate_is_bounded(self):
        self.feed.push(np.ones(100), 0.0)
        self.feed.push(np.ones(100), 0.125)
        self.assertEqual(len(self.windows), 1)

        self.feed.push(np.arange(100.0), 0.25)
        self.assertEqual(len(self.windows), 2)
        np.testing.assert_array_equal(self.windows[1].samples, np.arange(100.0))
        self.assertEqual(self.feed.windows_emitted, 2)

    def test_keeps_only_the_most_recent_audio(self):
        self.feed.push(np.arange(300.0), 0.0)
        np.testing.assert_array_equal(self.windows[0].samples, np.arange(200.0, 300.0))

    def test_buffer_is_cleared_after_emitting(self):
        self.feed.push(np.ones(100), 0.0)
        # Interval has passed but only half a window arrived since
        self.feed.push(np.ones(50), 0.5)
        self.assertEqual(len(self.windows), 1)
        self.feed.push(np.ones(50), 0.5625)
        self.assertEqual(len(self.windows), 2)

    def test_windows_own_their_samples(self):
        block = np.zeros(100)
        self.feed.push(block, 0.0)
        block[:] = 1.0
        self.assertTrue(np.all(self.windows[0].samples == 0.0))

    def test_first_channel_of_multichannel_blocks(self):
        block = np.column_stack((np.full(100, 0.25), np.full(100, -0.75)))
        self.feed.push(block, 0.0)
        self.assertTrue(np.all(self.windows[0].samples == 0.25))

    def test_float32_input(self):
        self.feed.push(np.ones(100, dtype=np.float32), 0.0)
        self.assertEqual(self.windows[0].samples.dtype, np.float64)

    def test_empty_block_is_ignored(self):
        self.feed.push(np.zeros(0), 0.0)
        self.assertEqual(self.windows, [])

    def test_reset(self):
        self.feed.push(np.ones(100), 0.0)
        self.feed.push(np.ones(60), 0.125)
        self.feed.reset()

        self.feed.push(np.ones(60), 0.1875)
        self.assertEqual(len(self.windows), 1)
        # The emission clock was reset too, so a full window goes out at once
        self.feed.push(np.ones(40), 0.1875)
        self.assertEqual(len(self.windows), 2)

    def test_zero_interval_emits_every_full_window(self):
        windows = []
        feed = SampleWindowFeed(1000, windows.append, window_duration_ms=10, process_interval_ms=0)
        for i in range(5):
            feed.push(np.ones(10), 0.0)
        self.assertEqual(len(windows), 5)

    def test_invalid_arguments(self):
        with self.assertRaises(ValueError):
            SampleWindowFeed(0, self.windows.append)
        with self.assertRaises(ValueError):
            SampleWindowFeed(1000, self.windows.append, window_duration_ms=0)


if __name__ == "__main__":
    unittest.main()
