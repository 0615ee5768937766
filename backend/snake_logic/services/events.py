"""
Snake Logic - Game Events & Audio Cues

Discrete events raised by a play session, and the tones a client should
play for them. Playback is the client's job; the backend only says what
to play, and says nothing when audio is muted.
"""

from typing import Dict, List


# ============================================
# EVENTS
# ============================================

MOVE_ACCEPTED = "move_accepted"
MOVE_REJECTED = "move_rejected"
SNAKE_EXITED = "snake_exited"
BOARD_CLEARED = "board_cleared"
HINT_SHOWN = "hint_shown"

ALL_EVENTS = [MOVE_ACCEPTED, MOVE_REJECTED, SNAKE_EXITED, BOARD_CLEARED, HINT_SHOWN]


def _tone(wave: str, start_freq: float, end_freq: float, duration: float, peak_gain: float, offset: float = 0.0) -> Dict:
    return {
        "wave": wave,
        "start_freq": start_freq,
        "end_freq": end_freq,
        "offset": offset,
        "duration": duration,
        "peak_gain": peak_gain,
    }


# event -> tones, offsets in seconds from cue start
AUDIO_CUES: Dict[str, List[Dict]] = {
    MOVE_ACCEPTED: [_tone("sine", 200, 600, 0.1, 0.05)],
    MOVE_REJECTED: [_tone("triangle", 100, 40, 0.2, 0.15)],
    SNAKE_EXITED: [_tone("sine", 880, 1200, 0.15, 0.03)],
    HINT_SHOWN: [_tone("sine", 440, 660, 0.3, 0.04)],
    BOARD_CLEARED: [
        _tone("sine", 523.25, 523.25, 0.4, 0.08),               # C5
        _tone("sine", 659.25, 659.25, 0.4, 0.08, offset=0.1),   # E5
        _tone("sine", 783.99, 783.99, 0.4, 0.08, offset=0.2),   # G5
        _tone("sine", 1046.5, 1046.5, 0.6, 0.08, offset=0.3),   # C6
    ],
}


class AudioCueMapper:
    """Turns session events into cues for the client."""

    def __init__(self, muted: bool = False):
        self.muted = muted

    def cue_for(self, event: str) -> List[Dict]:
        if self.muted:
            return []
        return [dict(tone) for tone in AUDIO_CUES.get(event, [])]

    def cues_for(self, events: List[str]) -> List[Dict]:
        """One entry per event that has a cue, in event order."""
        cues = []
        for event in events:
            tones = self.cue_for(event)
            if tones:
                cues.append({"event": event, "tones": tones})
        return cues
