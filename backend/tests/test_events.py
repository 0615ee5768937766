"""
Tests for event to audio cue mapping.
"""

from snake_logic.services.events import (
    ALL_EVENTS,
    AUDIO_CUES,
    BOARD_CLEARED,
    MOVE_REJECTED,
    SNAKE_EXITED,
    AudioCueMapper,
)


def test_every_event_has_a_cue():
    for event in ALL_EVENTS:
        assert AUDIO_CUES[event]


def test_board_cleared_plays_an_arpeggio():
    tones = AudioCueMapper().cue_for(BOARD_CLEARED)

    assert len(tones) == 4
    assert [t["offset"] for t in tones] == sorted(t["offset"] for t in tones)


def test_cues_follow_event_order():
    cues = AudioCueMapper().cues_for([SNAKE_EXITED, BOARD_CLEARED])
    assert [c["event"] for c in cues] == [SNAKE_EXITED, BOARD_CLEARED]


def test_unknown_event_has_no_cue():
    assert AudioCueMapper().cues_for(["something_else"]) == []


def test_muted_mapper_is_silent():
    mapper = AudioCueMapper(muted=True)

    assert mapper.cue_for(MOVE_REJECTED) == []
    assert mapper.cues_for(ALL_EVENTS) == []


def test_returned_tones_are_copies():
    tones = AudioCueMapper().cue_for(MOVE_REJECTED)
    tones[0]["peak_gain"] = 99

    assert AUDIO_CUES[MOVE_REJECTED][0]["peak_gain"] != 99
