"""Tests for project time progress and root-level completion."""

from datetime import UTC, datetime

import pytest

from mindplan.projects.progress import (
    is_iso_date,
    parse_project_date,
    project_completion,
    time_progress,
)
from tests.fixtures import make_project


def _at(value: str) -> datetime:
    return datetime.fromisoformat(value).replace(tzinfo=UTC)


class TestProjectCompletion:
    def test_no_roots(self):
        assert project_completion([]) == 0

    def test_mean_of_roots(self):
        assert project_completion([100, 0, 50]) == 50


class TestDates:
    @pytest.mark.parametrize("value", ["2023-01-01", "2023-01-01T12:30:00", "2023-01-01T12:30:00+02:00"])
    def test_valid(self, value):
        assert is_iso_date(value)

    @pytest.mark.parametrize("value", ["", "tomorrow", "2023-13-01", "01/02/2023"])
    def test_invalid(self, value):
        assert not is_iso_date(value)

    def test_naive_is_utc(self):
        assert parse_project_date("2023-01-01").tzinfo is UTC


class TestTimeProgress:
    def test_halfway(self):
        project = make_project(start_date="2023-01-01", end_date="2023-01-11")

        progress = time_progress(project, now=_at("2023-01-06"))

        assert progress["time_progress"] == pytest.approx(50)
        assert progress["days_elapsed"] == 5
        assert progress["days_remaining"] == 5
        assert progress["is_overdue"] is False

    def test_partial_day_rounds_remaining_up(self):
        project = make_project(start_date="2023-01-01", end_date="2023-01-11")

        progress = time_progress(project, now=_at("2023-01-06T12:00:00"))

        assert progress["days_elapsed"] == 5
        assert progress["days_remaining"] == 5

    def test_before_start(self):
        project = make_project(start_date="2023-01-10", end_date="2023-01-20")

        progress = time_progress(project, now=_at("2023-01-05"))

        assert progress["time_progress"] == 0
        assert progress["days_elapsed"] == -5
        assert progress["is_overdue"] is False

    def test_overdue(self):
        project = make_project(start_date="2023-01-01", end_date="2023-01-11")

        progress = time_progress(project, now=_at("2023-01-14"))

        assert progress["time_progress"] == 100
        assert progress["days_remaining"] == -3
        assert progress["is_overdue"] is True

    def test_end_day_not_overdue(self):
        project = make_project(start_date="2023-01-01", end_date="2023-01-11")
        progress = time_progress(project, now=_at("2023-01-11"))
        assert progress["days_remaining"] == 0
        assert progress["is_overdue"] is False

    def test_zero_length_window(self):
        project = make_project(start_date="2023-01-01", end_date="2023-01-01")
        assert time_progress(project, now=_at("2022-12-31"))["time_progress"] == 0
        assert time_progress(project, now=_at("2023-01-02"))["time_progress"] == 100

    def test_missing_dates(self):
        project = make_project(start_date=None, end_date=None)
        progress = time_progress(project, now=_at("2023-01-01"))
        assert progress == {
            "time_progress": 0.0,
            "days_elapsed": 0,
            "days_remaining": 0,
            "is_overdue": False,
        }
