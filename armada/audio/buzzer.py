"""Sound effects.

The controller reports game events; whether anything is heard is decided
here, from the shared settings. Tones are synthesised as square and
sawtooth waves and played through pygame.mixer.
"""

from __future__ import annotations

import logging
from array import array

import pygame

from armada.audio.sounds import AudioEvent, SoundPlayer
from armada.config import AUDIO_SAMPLE_RATE, AUDIO_VOLUME
from armada.simulation.state import Settings

logger = logging.getLogger(__name__)


# (frequency Hz, duration ms, waveform) -- frequency 0 is a rest
_SQUARE = "square"
_SAW = "saw"

_SWEEP = [(f, 8, _SQUARE) for f in range(250, 3000, 150)]

_MELODIES: dict[tuple[AudioEvent, bool | None], list[tuple[int, int, str]]] = {
    (AudioEvent.ATTACK, True): _SWEEP + [(0, 200, _SQUARE)]
    + [(f, 10, _SAW) for f in range(1000, 200, -50)],
    (AudioEvent.ATTACK, False): _SWEEP + [(0, 200, _SQUARE), (300, 300, _SQUARE),
                                          (287, 500, _SQUARE)],
    (AudioEvent.ENEMY_ATTACK, True): [(523, 100, _SQUARE), (415, 100, _SQUARE),
                                      (370, 200, _SQUARE)],
    (AudioEvent.ENEMY_ATTACK, False): [(659, 100, _SQUARE), (0, 60, _SQUARE),
                                       (659, 100, _SQUARE)],
    (AudioEvent.WIN, None): [(523, 120, _SQUARE), (659, 120, _SQUARE),
                             (784, 120, _SQUARE), (1047, 300, _SQUARE)],
    (AudioEvent.LOSE, None): [(392, 200, _SQUARE), (370, 200, _SQUARE),
                              (349, 200, _SQUARE), (330, 500, _SQUARE)],
}


def synthesize(
    notes: list[tuple[int, int, str]],
    rate: int = AUDIO_SAMPLE_RATE,
    channels: int = 1,
) -> bytes:
    """Render notes to signed 16-bit PCM, each sample repeated per channel."""
    amplitude = int(32767 * AUDIO_VOLUME)
    samples = array("h")
    for freq, duration_ms, waveform in notes:
        count = rate * duration_ms // 1000
        if freq == 0:
            samples.extend([0] * (count * channels))
            continue
        period = rate / freq
        for i in range(count):
            phase = (i % period) / period
            if waveform == _SAW:
                value = int(amplitude * (2 * phase - 1))
            else:
                value = amplitude if phase < 0.5 else -amplitude
            samples.extend([value] * channels)
    return samples.tobytes()


class Buzzer(SoundPlayer):
    """Plays event sounds unless sounds are disabled in the settings."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._sounds: dict[tuple[AudioEvent, bool | None], pygame.mixer.Sound] = {}
        self._available = False
        try:
            pygame.mixer.init(
                frequency=AUDIO_SAMPLE_RATE, size=-16, channels=1, allowedchanges=0,
            )
        except pygame.error as e:
            logger.warning("Audio unavailable, running silent: %s", e)
            return

        # pygame.init() may have opened the mixer already with its own format
        mixer_format = pygame.mixer.get_init()
        if mixer_format is None or mixer_format[1] != -16:
            logger.warning("Unsupported mixer format %s, running silent", mixer_format)
            return
        rate, _, channels = mixer_format
        self._available = True
        for key, notes in _MELODIES.items():
            pcm = synthesize(notes, rate, channels)
            self._sounds[key] = pygame.mixer.Sound(buffer=pcm)

    def play(self, event: AudioEvent, outcome: bool | None = None) -> None:
        if not self._settings.sounds_enabled or not self._available:
            return
        sound = self._sounds.get((event, outcome))
        if sound is None:
            logger.debug("No sound for %s/%s", event.name, outcome)
            return
        sound.play()
