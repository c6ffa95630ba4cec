"""Tests for merging a snapshot history into cumulative coverage."""

from __future__ import annotations

import pytest

from akainaa.coverage.history import SnapshotHistory
from akainaa.coverage.merge import compute, merge_lines
from akainaa.coverage.snapshot import Snapshot


@pytest.fixture
def history():
    """Create an empty history."""
    return SnapshotHistory()


class TestComputeEmpty:
    """An empty history has nothing to merge."""

    def test_empty_history_returns_none(self, history):
        assert compute(history) is None

    def test_empty_sequence_returns_none(self):
        assert compute([]) is None


class TestComputeSingleSnapshot:
    """Merging one snapshot is the identity."""

    def test_single_snapshot_is_returned_unchanged(self, history):
        snapshot = Snapshot({'/a.py': [1, None, 0, 7], '/b.py': [None, 3]})
        history.push(snapshot)

        merged = compute(history)

        assert dict(merged.files) == dict(snapshot.files)


class TestComputeSums:
    """Counts are summed line by line."""

    def test_equal_length_snapshots_are_summed(self, history, make_snapshot):
        history.push(make_snapshot([1, 2, 0]))
        history.push(make_snapshot([3, 4, 5]))

        assert compute(history).get('/src/app.py') == (4, 6, 5)

    def test_absent_newer_value_takes_older_value(self, history, make_snapshot):
        history.push(make_snapshot([3, 2]))  # older
        history.push(make_snapshot([5, None]))  # newer

        assert compute(history).get('/src/app.py') == (8, 2)

    def test_absent_older_value_overwrites_accumulated_sum(self, history, make_snapshot):
        history.push(make_snapshot([None, 1]))  # oldest
        history.push(make_snapshot([4, 1]))
        history.push(make_snapshot([6, 1]))  # newest

        assert compute(history).get('/src/app.py') == (None, 3)

    def test_absent_accumulated_value_restarts_from_older_values(self, history, make_snapshot):
        history.push(make_snapshot([2]))  # oldest
        history.push(make_snapshot([3]))
        history.push(make_snapshot([None]))  # newest

        # None + 3 -> 3, then 3 + 2 -> 5
        assert compute(history).get('/src/app.py') == (5,)

    def test_zero_is_summed_not_treated_as_absent(self, history, make_snapshot):
        history.push(make_snapshot([0, 4]))
        history.push(make_snapshot([2, 0]))

        assert compute(history).get('/src/app.py') == (2, 4)


class TestComputeSizeMismatch:
    """Snapshots of a file with a different line count are skipped."""

    def test_older_snapshot_with_different_length_is_dropped(self, history, make_snapshot):
        older = list(range(10))
        newer = [1] * 12
        history.push(make_snapshot(older))
        history.push(make_snapshot(newer))

        assert compute(history).get('/src/app.py') == tuple(newer)

    def test_only_the_mismatched_file_is_dropped(self, history):
        history.push(Snapshot({'/a.py': [1, 1], '/b.py': [1]}))
        history.push(Snapshot({'/a.py': [1, 1, 1], '/b.py': [2]}))

        merged = compute(history)

        assert merged.get('/a.py') == (1, 1, 1)
        assert merged.get('/b.py') == (3,)

    def test_matching_snapshots_beyond_a_mismatch_still_merge(self, history, make_snapshot):
        history.push(make_snapshot([1, 1]))  # oldest, matches newest
        history.push(make_snapshot([5, 5, 5]))
        history.push(make_snapshot([2, 2]))  # newest

        assert compute(history).get('/src/app.py') == (3, 3)


class TestComputeFiles:
    """Files are matched by path."""

    def test_file_only_in_older_snapshot_is_included(self, history):
        history.push(Snapshot({'/old.py': [4]}))
        history.push(Snapshot({'/new.py': [1]}))

        merged = compute(history)

        assert merged.get('/old.py') == (4,)
        assert merged.get('/new.py') == (1,)
        assert len(merged) == 2

    def test_accepts_oldest_first_sequence(self):
        snapshots = [Snapshot({'/a.py': [3, 2]}), Snapshot({'/a.py': [5, None]})]

        assert compute(snapshots).get('/a.py') == (8, 2)


class TestComputeHasNoSideEffects:
    """Reading the merged view never changes the history."""

    def test_compute_twice_gives_equal_results(self, history, make_snapshot):
        history.push(make_snapshot([1, None, 2]))
        history.push(make_snapshot([3, 4, None]))

        assert compute(history) == compute(history)

    def test_snapshots_are_not_mutated(self, history, make_snapshot):
        older = make_snapshot([1, 2])
        newer = make_snapshot([3, 4])
        history.push(older)
        history.push(newer)

        compute(history)

        assert older.lines('/src/app.py') == (1, 2)
        assert newer.lines('/src/app.py') == (3, 4)
        assert history.to_ordered_sequence() == (older, newer)


class TestMergeLines:
    """Test the element-wise merge step."""

    def test_merges_in_place(self):
        accumulated = [1, None, 3]
        merge_lines(accumulated, [2, 5, None])

        assert accumulated == [3, 5, None]
