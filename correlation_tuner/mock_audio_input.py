import numpy as np

from .core.interfaces import IAudioInput


class MockAudioInput(IAudioInput):
    """An audio input for unit tests. Blocks are delivered by calling ``feed``."""

    def __init__(self, sample_rate=48000, fail_to_start=False):
        self.callback = None
        self.running = False
        self.fail_to_start = fail_to_start
        self._sample_rate = sample_rate

    @property
    def sample_rate(self):
        return self._sample_rate

    def start(self, callback):
        if self.fail_to_start:
            return False
        self.callback = callback
        self.running = True
        return True

    def stop(self):
        self.running = False

    def is_running(self):
        return self.running

    def feed(self, block, timestamp):
        """Deliver one block as if it had just been captured."""
        if self.running and self.callback:
            self.callback(np.asarray(block), timestamp)
