import contextlib
import io
import os
import re
import tempfile
import unittest

import numpy as np
import soundfile as sf

from correlation_tuner.cli.main import build_parser, main

TABLE_LINE = re.compile(r"^\s*\d+\s+\d+\.\d{2} Hz")
RESULT_LINE = re.compile(r"^\s*\d+\.\d{3}s  ")


def run(args):
    output = io.StringIO()
    with contextlib.redirect_stdout(output):
        code = main(args)
    return code, output.getvalue().splitlines()


class TestCli(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmp.cleanup()

    def test_parser(self):
        args = build_parser().parse_args(["analyze", "take.wav", "--threshold", "20"])
        self.assertEqual(args.command, "analyze")
        self.assertEqual(args.file, "take.wav")
        self.assertEqual(args.threshold, 20.0)

    def test_no_command(self):
        code, _ = run([])
        self.assertEqual(code, 1)

    def test_table(self):
        code, lines = run(["table"])
        self.assertEqual(code, 0)
        rows = [line for line in lines if TABLE_LINE.match(line)]
        self.assertEqual(len(rows), 90)
        self.assertIn("C (a bit flat)", rows[0])
        self.assertIn("65.41 Hz", rows[1])

    def test_table_with_options(self):
        code, lines = run(["table", "--base-frequency", "110", "--semitones", "12"])
        self.assertEqual(code, 0)
        self.assertEqual(len([line for line in lines if TABLE_LINE.match(line)]), 36)

    def test_invalid_table(self):
        code, _ = run(["table", "--semitones", "0"])
        self.assertEqual(code, 1)

    def test_analyze(self):
        path = os.path.join(self.tmp.name, "a3.wav")
        t = np.arange(48000) / 48000
        sf.write(path, 0.5 * np.sin(2 * np.pi * 220.0 * t), 48000)

        code, lines = run(["--config-dir", self.tmp.name, "analyze", path])
        self.assertEqual(code, 0)
        results = [line for line in lines if RESULT_LINE.match(line)]
        self.assertEqual(len(results), 4)
        for line in results:
            self.assertIn("A3", line)

    def test_analyze_silence(self):
        path = os.path.join(self.tmp.name, "silence.wav")
        sf.write(path, np.zeros(4800), 48000)

        code, lines = run(["--config-dir", self.tmp.name, "analyze", path])
        self.assertEqual(code, 0)
        results = [line for line in lines if RESULT_LINE.match(line)]
        self.assertEqual(len(results), 1)
        self.assertTrue(results[0].endswith("-"))

    def test_analyze_missing_file(self):
        missing = os.path.join(self.tmp.name, "missing.wav")
        code, _ = run(["--config-dir", self.tmp.name, "analyze", missing])
        self.assertEqual(code, 1)

    def test_analyze_invalid_window_options(self):
        path = os.path.join(self.tmp.name, "silence.wav")
        sf.write(path, np.zeros(4800), 48000)
        for options in (["--hop-ms", "-5"], ["--window-ms", "0"], ["--hop-ms", "0"]):
            with self.subTest(options=options):
                code, lines = run(["--config-dir", self.tmp.name, "analyze", path] + options)
                self.assertEqual(code, 1)
                self.assertEqual([line for line in lines if RESULT_LINE.match(line)], [])

    def test_invalid_threshold(self):
        path = os.path.join(self.tmp.name, "silence.wav")
        sf.write(path, np.zeros(4800), 48000)
        code, _ = run(["--config-dir", self.tmp.name, "analyze", path, "--threshold", "-1"])
        self.assertEqual(code, 1)


if __name__ == "__main__":
    unittest.main()
