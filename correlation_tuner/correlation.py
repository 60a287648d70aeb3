"""Complex-exponential correlation of a sample window against candidate frequencies.

For each candidate frequency ``f`` the window is correlated with
``exp(i * 2π f t / sample_rate)``:

    real = Σ sample[t] * cos(2π f t / sample_rate)
    imag = Σ sample[t] * sin(2π f t / sample_rate)

This is one bin of a discrete Fourier transform, evaluated at an arbitrary
frequency. Equal-tempered note frequencies do not fall on the integer bins
of an FFT of the window, which is why the bins are evaluated directly.
"""

from __future__ import annotations

import numpy as np

from .logger import get_logger
from .note_types import CandidateTable, SampleWindow

logger = get_logger(__name__)

# Samples per block of the phase matrix; bounds memory to
# candidates * BLOCK_SIZE doubles per trigonometric table.
BLOCK_SIZE = 4096


def correlate(
    window: SampleWindow, table: CandidateTable, block_size: int = BLOCK_SIZE
) -> np.ndarray:
    """Correlate a window with every candidate in the table.

    Args:
        window: Mono PCM samples and their sample rate
        table: Candidate frequencies to test
        block_size: Number of samples evaluated per matrix product

    Returns:
        float64 array of shape (len(table), 2); row i is the (real, imaginary)
        correlation for table[i]. An empty window yields all zeros.
    """
    frequencies = table.frequencies
    result = np.zeros((len(frequencies), 2), dtype=np.float64)

    samples = window.samples
    n = len(samples)
    if n == 0 or len(frequencies) == 0:
        return result

    scale = 2 * np.pi / window.sample_rate
    # Angular step per sample, one per candidate
    omega = (scale * frequencies)[:, np.newaxis]

    for start in range(0, n, block_size):
        block = samples[start : start + block_size]
        t = np.arange(start, start + len(block), dtype=np.float64)
        phase = omega * t
        result[:, 0] += np.cos(phase) @ block
        result[:, 1] += np.sin(phase) @ block

    return result


def squared_magnitudes(correlation: np.ndarray) -> np.ndarray:
    """Squared magnitude (real² + imag²) of each correlation row."""
    correlation = np.asarray(correlation, dtype=np.float64).reshape(-1, 2)
    return correlation[:, 0] ** 2 + correlation[:, 1] ** 2
