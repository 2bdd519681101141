"""Sounddevice-backed completion chime."""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from .errors import AlertError

DEFAULT_SAMPLE_RATE_HZ = 44100
CHIME_SECONDS = 0.6
CHIME_TONES_HZ = (880.0, 1320.0)


def build_chime(
    sample_rate_hz: int = DEFAULT_SAMPLE_RATE_HZ,
    *,
    volume: float = 0.5,
    seconds: float = CHIME_SECONDS,
) -> np.ndarray:
    """Synthesize a short decaying two-tone chime as mono float32 PCM."""
    if sample_rate_hz <= 0:
        raise AlertError("sample_rate_hz must be greater than zero")
    if seconds <= 0:
        raise AlertError("seconds must be greater than zero")

    t = np.arange(int(sample_rate_hz * seconds), dtype=np.float32) / sample_rate_hz
    wave = sum(np.sin(2.0 * np.pi * tone * t) for tone in CHIME_TONES_HZ)
    envelope = np.exp(-6.0 * t)
    pcm = wave * envelope / len(CHIME_TONES_HZ)
    return (np.clip(volume, 0.0, 1.0) * pcm).astype(np.float32)


class SoundDeviceCuePlayer:
    """Plays the completion chime without blocking the caller."""

    def __init__(
        self,
        output_device_index: Optional[int] = None,
        volume: float = 0.5,
        sample_rate_hz: int = DEFAULT_SAMPLE_RATE_HZ,
        logger: Optional[logging.Logger] = None,
    ):
        self._output_device_index = output_device_index
        self._sample_rate_hz = sample_rate_hz
        self._logger = logger or logging.getLogger("alerts.sound")
        self._chime = build_chime(sample_rate_hz, volume=volume)

    def play_cue(self) -> None:
        try:
            # PortAudio is loaded on import; a host without it only loses the cue.
            import sounddevice as sd

            sd.play(
                self._chime,
                samplerate=self._sample_rate_hz,
                device=self._output_device_index,
                blocking=False,
            )
        except Exception as error:
            raise AlertError(f"Cue playback failed: {error}") from error
        self._logger.debug("Playing completion cue (%d samples)", len(self._chime))
