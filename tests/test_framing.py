"""Tests for resampling and frame assembly."""

import numpy as np
import pytest

from notetrack.config import DetectionConfig
from notetrack.input import FrameAssembler, resample_linear

from conftest import sine


class TestResampleLinear:
    def test_same_rate_is_copy(self):
        block = np.arange(10, dtype=np.float32)
        out = resample_linear(block, 16000, 16000)
        np.testing.assert_array_equal(out, block)
        assert out is not block

    def test_output_length(self):
        assert len(resample_linear(np.zeros(128), 48000, 16000)) == 43  # round(42.67)
        assert len(resample_linear(np.zeros(128), 44100, 16000)) == 46  # round(46.44)
        assert len(resample_linear(np.zeros(100), 8000, 16000)) == 200

    def test_linear_interpolation(self):
        block = np.array([0.0, 1.0, 2.0, 3.0], dtype=np.float32)
        out = resample_linear(block, 8000, 16000)
        np.testing.assert_allclose(out, [0.0, 0.5, 1.0, 1.5, 2.0, 2.5, 3.0, 3.0])

    def test_decimation_picks_samples(self):
        block = np.arange(12, dtype=np.float32)
        out = resample_linear(block, 48000, 16000)
        np.testing.assert_allclose(out, [0, 3, 6, 9])

    def test_empty_block(self):
        assert len(resample_linear(np.array([]), 44100, 16000)) == 0

    def test_preserves_tone(self):
        tone = sine(440.0, 4410, sr=44100)
        out = resample_linear(tone, 44100, 16000)
        expected = sine(440.0, len(out), sr=16000)
        np.testing.assert_allclose(out, expected, atol=0.02)


class TestFrameAssembler:
    @pytest.fixture
    def assembler(self, config):
        return FrameAssembler(config)

    def test_no_frame_until_full(self, assembler):
        assert assembler.push(np.zeros(1000), 16000) == []
        assert assembler.buffered == 1000

    def test_emits_fixed_size_frames(self, assembler):
        frames = assembler.push(np.ones(1000), 16000)
        frames += assembler.push(np.ones(1000), 16000)
        assert len(frames) == 1
        assert len(frames[0]) == 1024
        assert assembler.buffered == 976

    def test_remainder_shifted_to_front(self, assembler):
        signal = np.arange(1500, dtype=np.float32)
        frames = assembler.push(signal, 16000)
        assert len(frames) == 1
        np.testing.assert_array_equal(frames[0], signal[:1024])

        frames = assembler.push(np.arange(1500, 2048, dtype=np.float32), 16000)
        assert len(frames) == 1
        np.testing.assert_array_equal(frames[0], np.arange(1024, 2048, dtype=np.float32))
        assert assembler.buffered == 0

    def test_several_frames_per_block(self, assembler):
        frames = assembler.push(np.zeros(2048), 16000)
        assert len(frames) == 2
        assert all(len(f) == 1024 for f in frames)

    def test_frames_are_independent_copies(self, assembler):
        frames = assembler.push(np.ones(1024), 16000)
        assembler.push(np.zeros(1024), 16000)
        assert np.all(frames[0] == 1.0)

    def test_overflow_is_dropped(self, assembler):
        frames = assembler.push(np.arange(3000, dtype=np.float32), 16000)
        # capacity 2048: 952 samples dropped, two full frames emitted
        assert assembler.dropped_samples == 952
        assert len(frames) == 2
        np.testing.assert_array_equal(frames[1], np.arange(1024, 2048, dtype=np.float32))
        assert assembler.buffered == 0

    def test_overflow_with_partial_buffer(self, assembler):
        assembler.push(np.zeros(1000), 16000)
        frames = assembler.push(np.ones(1500), 16000)
        assert assembler.dropped_samples == 452
        assert len(frames) == 2

    def test_resamples_native_rate(self, assembler):
        frames = []
        for _ in range(20):
            frames += assembler.push(np.zeros(512), 44100)
        # 20 * round(512 / 2.75625) = 20 * 186 samples at 16 kHz
        assert len(frames) == 3
        assert assembler.buffered == 20 * 186 - 3 * 1024

    def test_reset(self, assembler):
        assembler.push(np.zeros(700), 16000)
        assembler.reset()
        assert assembler.buffered == 0

    def test_custom_frame_size(self):
        assembler = FrameAssembler(DetectionConfig(frame_size=2048, min_freq=60.0))
        frames = assembler.push(np.zeros(4096), 16000)
        assert [len(f) for f in frames] == [2048, 2048]
