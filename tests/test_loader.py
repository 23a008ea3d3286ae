"""Tests for offline audio file loading."""

import numpy as np
import pytest
import soundfile as sf

from notetrack.input import AudioLoader

from conftest import SR, sine


@pytest.fixture
def wav_path(tmp_path):
    path = tmp_path / "tone.wav"
    stereo = np.stack([sine(440.0, SR), sine(440.0, SR)], axis=1)
    sf.write(str(path), stereo, SR)
    return path


class TestAudioLoader:
    def test_native_rate_mono(self, wav_path):
        audio, sr = AudioLoader().load(str(wav_path))
        assert sr == SR
        assert audio.ndim == 1
        assert audio.dtype == np.float32
        assert len(audio) == SR

    def test_slice(self, wav_path):
        audio, sr = AudioLoader().load(str(wav_path), start=0.25, duration=0.5)
        assert len(audio) == pytest.approx(SR // 2, abs=2)

    def test_normalize(self, wav_path):
        audio, _ = AudioLoader(normalize=True).load(str(wav_path))
        assert np.abs(audio).max() == pytest.approx(1.0, abs=1e-3)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            AudioLoader().load(str(tmp_path / "missing.wav"))

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("not audio")
        with pytest.raises(ValueError, match="Unsupported format"):
            AudioLoader().load(str(path))
