"""
Unit Tests for the Gradebook matrix and per-student task rows
"""
import pytest

from app.helpers.gradebook import build_gradebook, filter_students, order_tasks, student_task_rows
from app.models import Task, TaskStatus


def _statuses(row):
    return [cell.status for cell in row.cells]


class TestBuildGradebook:

    def test_columns_ordered_by_deadline(self, view, now):
        book = build_gradebook(view, now)
        assert [c.title for c in book.columns] == ["Essay", "Timeline", "Lab Report", "Project"]

    def test_rows_ordered_by_latest_submission(self, view, now):
        book = build_gradebook(view, now)
        assert [r.name for r in book.rows] == ["Ani", "Budi", "Doe, Jane"]

    def test_cells(self, view, now):
        ani, budi, jane = build_gradebook(view, now).rows

        assert _statuses(ani) == [TaskStatus.GRADED, TaskStatus.PENDING, TaskStatus.SUBMITTED, TaskStatus.PENDING]
        assert ani.cells[0].grade == 90
        assert _statuses(budi)[0] == TaskStatus.GRADED
        # t1 is not assigned to Jane's class, t4 is and has passed
        assert _statuses(jane) == [TaskStatus.PENDING, TaskStatus.OVERDUE, TaskStatus.PENDING, TaskStatus.PENDING]
        assert jane.class_name == "X IPS 2"

    def test_stats_across_all_students(self, view, now):
        stats = build_gradebook(view, now).stats
        assert stats.class_id is None
        assert stats.student_count == 3
        assert stats.task_count == 4
        assert stats.completion_rate == 37.5
        assert stats.average_grade == 82.5

    def test_class_filter(self, view, now):
        book = build_gradebook(view, now, class_id="c1")

        assert [c.task_id for c in book.columns] == ["t1", "t2", "t3"]
        assert {r.name for r in book.rows} == {"Ani", "Budi"}
        assert book.stats.completion_rate == 50.0
        assert book.stats.name == "X IPA 1"

    def test_search_is_case_insensitive(self, view, now):
        assert [r.name for r in build_gradebook(view, now, search="BUD").rows] == ["Budi"]
        assert {r.name for r in build_gradebook(view, now, search="an").rows} == {"Ani", "Doe, Jane"}

    def test_empty_view(self, build_view, now):
        book = build_gradebook(build_view({}), now)
        assert book.rows == [] and book.columns == []
        assert book.stats.completion_rate == 0


class TestHelpers:

    def test_unknown_deadlines_sort_last(self):
        tasks = [Task(id="b", title="B"), Task(id="a", title="A")]
        assert [t.id for t in order_tasks(tasks)] == ["a", "b"]

    def test_filter_students(self, view):
        assert [s.name for s in filter_students(view.students, "c2")] == ["Doe, Jane"]
        assert filter_students(view.students, None, "zzz") == []


class TestStudentTaskRows:

    def test_unsorted_follows_task_order(self, view, now):
        report = student_task_rows(view, view.student("uid-s1"), now)
        assert [r.task_id for r in report.tasks] == ["t1", "t2", "t3"]
        assert report.metrics.completion_rate == 66.7

    def test_sort_by_status(self, view, now):
        student = view.student("uid-s1")
        asc = student_task_rows(view, student, now, sort_by="status")
        desc = student_task_rows(view, student, now, sort_by="status", order="desc")

        assert [r.status for r in asc.tasks] == [TaskStatus.GRADED, TaskStatus.SUBMITTED, TaskStatus.PENDING]
        assert [r.status for r in desc.tasks] == [TaskStatus.PENDING, TaskStatus.SUBMITTED, TaskStatus.GRADED]

    def test_sort_by_title_and_deadline(self, view, now):
        student = view.student("uid-s1")
        assert [r.title for r in student_task_rows(view, student, now, sort_by="title").tasks] == [
            "Essay", "Lab Report", "Project",
        ]
        assert [r.title for r in student_task_rows(view, student, now, sort_by="deadline", order="desc").tasks] == [
            "Project", "Lab Report", "Essay",
        ]

    def test_row_carries_submission_details(self, view, now):
        row = student_task_rows(view, view.student("uid-s1"), now).tasks[0]
        assert row.submission_id == "sub1"
        assert row.grade == 90
        assert row.teacher_comment == "Bagus"

    def test_bad_sort_arguments(self, view, now):
        student = view.student("uid-s1")
        with pytest.raises(ValueError):
            student_task_rows(view, student, now, sort_by="grade")
        with pytest.raises(ValueError):
            student_task_rows(view, student, now, order="up")
