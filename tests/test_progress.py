"""Tests for the cook progress tracker."""

from uetail.progress import ProgressTracker

PROGRESS = 'LogCook: Display: Cooked packages 816 Packages Remain 4532 Total 5348'


def test_progress_line_activates():
    t = ProgressTracker()
    t.update(PROGRESS)
    st = t.state
    assert st.active
    assert (st.completed, st.remaining, st.total) == (816, 4532, 5348)
    assert st.percent() == 15


def test_started_resets_counters():
    t = ProgressTracker()
    t.update(PROGRESS)
    t.update('LogCook: Display: Cook Command Started')
    st = t.state
    assert st.active
    assert (st.completed, st.remaining, st.total) == (0, 0, 0)


def test_completed_keeps_counters():
    t = ProgressTracker()
    t.update(PROGRESS)
    t.update('LogCook: Display: COOK COMMAND COMPLETED in 12s')
    st = t.state
    assert not st.active
    assert (st.completed, st.remaining, st.total) == (816, 4532, 5348)


def test_unrelated_lines_are_ignored():
    t = ProgressTracker()
    for raw in ('', 'LogTemp: total 5', 'Error: cook failed', '[x]LogCook: waiting'):
        t.update(raw)
    st = t.state
    assert not st.active
    assert (st.completed, st.remaining, st.total) == (0, 0, 0)
    assert st.ratio() == 0.0


def test_reset():
    t = ProgressTracker()
    t.update(PROGRESS)
    t.reset()
    assert not t.state.active
    assert t.state.total == 0
