from __future__ import annotations

import pytest

from fieldnav.core.smoothing import (
    EMPTY,
    HeadingSmoother,
    SmoothingState,
    alignment_cue,
    classify_alignment,
    step_smoothing,
)
from fieldnav.core.types import Alignment


def _feed(smoother: HeadingSmoother, values, start: float = 0.0, step: float = 0.25):
    emitted = []
    for i, v in enumerate(values):
        emitted.append(smoother.update(v, start + i * step))
    return emitted


def test_mean_of_five_respects_deadband():
    s = HeadingSmoother()
    emitted = _feed(s, [10, 12, 11, 9, 13])
    assert s.state.mean == pytest.approx(11.0)
    # 11 is within 2 degrees of the first emitted value, so it is not published
    assert emitted == [10.0, None, None, None, None]
    assert s.value == 10.0


def test_mean_of_five_is_emitted_when_far_from_previous():
    s = HeadingSmoother()
    emitted = _feed(s, [40, 10, 12, 11, 9, 13])
    assert s.state.buffer == (10.0, 12.0, 11.0, 9.0, 13.0)
    assert emitted[-1] == pytest.approx(11.0)
    assert s.value == pytest.approx(11.0)


def test_samples_closer_than_interval_are_ignored():
    s = HeadingSmoother()
    s.update(10.0, 0.0)
    before = s.state
    assert s.update(90.0, 0.05) is None
    assert s.state == before
    assert s.update(90.0, 0.1) == pytest.approx(50.0)


def test_interval_counts_from_last_emission():
    s = HeadingSmoother()
    assert s.update(10.0, 0.0) == 10.0
    # buffered but inside the deadband, so nothing is published
    assert s.update(11.0, 0.10) is None
    assert s.state.last_emitted == 0.0
    # only 50 ms after the previous sample, yet 150 ms after the last emission
    assert s.update(40.0, 0.15) == pytest.approx(61.0 / 3.0)
    assert s.state.buffer == (10.0, 11.0, 40.0)
    assert s.state.last_emitted == 0.15


def test_buffer_is_bounded():
    s = HeadingSmoother()
    _feed(s, [1, 2, 3, 4, 5, 6, 7])
    assert s.state.buffer == (3.0, 4.0, 5.0, 6.0, 7.0)


def test_unavailable_input_clears_everything():
    s = HeadingSmoother()
    _feed(s, [30, 31])
    assert s.update(None, 1.0) is None
    assert s.state == EMPTY
    assert s.value is None
    # next sample is accepted immediately and emitted
    assert s.update(5.0, 1.01) == 5.0


def test_step_smoothing_returns_new_state():
    state, emitted = step_smoothing(SmoothingState(), 20.0, 3.0)
    assert emitted == 20.0
    assert state == SmoothingState(buffer=(20.0,), smoothed=20.0, last_emitted=3.0)


def test_invalid_parameters():
    with pytest.raises(ValueError):
        HeadingSmoother(buffer_size=0)
    with pytest.raises(ValueError):
        HeadingSmoother(deadband_deg=-1)


def test_classify_alignment_boundaries():
    assert classify_alignment(None) == Alignment.WAITING
    assert classify_alignment(0.0) == Alignment.ALIGNED
    assert classify_alignment(-10.0) == Alignment.ALIGNED
    assert classify_alignment(10.5) == Alignment.ADJUST
    assert classify_alignment(45.0) == Alignment.ADJUST
    assert classify_alignment(-45.1) == Alignment.OFF
    assert classify_alignment(180.0) == Alignment.OFF


def test_alignment_cue():
    assert alignment_cue(Alignment.ALIGNED) == (0, 0.4)
    assert alignment_cue(Alignment.ADJUST) == (1, 0.3)
    assert alignment_cue(Alignment.OFF) == (2, 0.2)
    assert alignment_cue(Alignment.WAITING) == (3, 0.0)
