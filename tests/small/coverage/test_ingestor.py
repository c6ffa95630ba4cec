"""Tests for loading coverage reports into snapshots."""

from __future__ import annotations

import os

import pytest

from akainaa.coverage.ingestor import LoadStatus, MalformedReportError, load, parse_report


class TestLoadIdleStates:
    """Missing inputs are normal states, not errors."""

    def test_no_project_root_returns_no_snapshot(self, tmp_path):
        result = load(tmp_path / 'coverage.json', None)

        assert result.status == LoadStatus.NO_PROJECT_ROOT
        assert result.snapshot is None
        assert not result.is_malformed

    def test_missing_report_returns_no_snapshot(self, project_root):
        result = load(project_root / 'tmp' / 'coverage.json', project_root)

        assert result.status == LoadStatus.REPORT_MISSING
        assert result.snapshot is None


class TestLoadReport:
    """Test successful report loading."""

    def test_relative_keys_are_prefixed_with_project_root(self, project_root, write_report):
        report_path = write_report({'lib/app.py': {'lines': [None, 1, 0]}})

        result = load(report_path, project_root)

        assert result.is_loaded
        expected_path = os.path.join(str(project_root), 'lib/app.py')
        assert result.snapshot.lines(expected_path) == (None, 1, 0)

    def test_absolute_keys_pass_through(self, project_root, write_report):
        report_path = write_report({'/opt/shared/util.py': {'lines': [2, None]}})

        result = load(report_path, project_root)

        assert result.snapshot.lines('/opt/shared/util.py') == (2, None)

    def test_empty_report_loads_empty_snapshot(self, project_root, write_report):
        result = load(write_report({}), project_root)

        assert result.is_loaded
        assert len(result.snapshot) == 0

    def test_extra_keys_in_entry_are_ignored(self, project_root, write_report):
        report_path = write_report({'/a.py': {'lines': [1], 'branches': []}})

        assert load(report_path, project_root).snapshot.lines('/a.py') == (1,)


class TestLoadMalformedReport:
    """Unparsable reports are surfaced as MALFORMED_REPORT."""

    def test_invalid_json_is_malformed(self, project_root, write_report):
        report_path = write_report('{"lib/app.py": {"lines": [1, 2')

        result = load(report_path, project_root)

        assert result.status == LoadStatus.MALFORMED_REPORT
        assert result.snapshot is None
        assert str(report_path) in result.error

    @pytest.mark.parametrize(
        'data',
        [
            [1, 2, 3],
            {'a.py': [1, 2]},
            {'a.py': {'counts': [1]}},
            {'a.py': {'lines': 'abc'}},
            {'a.py': {'lines': [1, -1]}},
            {'a.py': {'lines': [1, 2.5]}},
            {'a.py': {'lines': [True]}},
        ],
        ids=['not-object', 'no-entry-object', 'no-lines', 'lines-not-array', 'negative', 'float', 'bool'],
    )
    def test_wrong_shape_is_malformed(self, project_root, write_report, data):
        result = load(write_report(data), project_root)

        assert result.is_malformed
        assert result.error


class TestParseReport:
    """Test the lower level parser."""

    def test_raises_malformed_report_error(self, tmp_path):
        with pytest.raises(MalformedReportError, match='not valid JSON'):
            parse_report('not json', tmp_path)

    def test_malformed_report_error_is_value_error(self):
        assert issubclass(MalformedReportError, ValueError)

    def test_zero_counts_are_kept(self, tmp_path):
        snapshot = parse_report('{"/a.py": {"lines": [0, null, 3]}}', tmp_path)

        assert snapshot.lines('/a.py') == (0, None, 3)
