import csv
import io
from datetime import date
from typing import Mapping, Optional, Sequence

from app.models import Submission, Task, User

HEADER = ["Name", "Class"]
SUBMITTED = "Submitted"
MISSING = "Missing"

# leading characters a spreadsheet reads as the start of a formula
FORMULA_PREFIXES = ("=", "+", "-", "@", "\t", "\r")


def export_filename(today: date) -> str:
    return f"rekap_nilai_stms_{today.isoformat()}.csv"


def text_cell(value: Optional[str]) -> str:
    """Free text from the snapshot, with formula-like values prefixed by a quote."""
    text = value or ""
    if text.startswith(FORMULA_PREFIXES):
        return "'" + text
    return text


def _grade_text(grade: int | float) -> str:
    if isinstance(grade, float) and grade.is_integer():
        grade = int(grade)
    return str(grade)


def cell_value(submission: Optional[Submission]) -> str:
    """Grade if graded, "Submitted" if waiting for a grade, otherwise "Missing"."""
    if submission is None:
        return MISSING
    if submission.grade is not None:
        return _grade_text(submission.grade)
    return SUBMITTED


def export_gradebook_csv(
    students: Sequence[User],
    tasks: Sequence[Task],
    lookup: Mapping[str, Mapping[str, Submission]],
    class_names: Optional[Mapping[str, str]] = None,
) -> str:
    """
    Serialize the gradebook as CSV text.

    `lookup` is task id -> student id -> submission, as built by
    `submissions_by_task`. Fields containing commas, quotes or newlines are
    quoted by the csv module; text cells that look like formulas are
    prefixed with a single quote.
    """
    class_names = class_names or {}

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\r\n")
    writer.writerow(HEADER + [text_cell(task.title) for task in tasks])

    for student in students:
        class_cell = text_cell(class_names.get(student.class_id) or student.class_id) or "-"
        row = [text_cell(student.name), class_cell]
        for task in tasks:
            row.append(cell_value(lookup.get(task.id, {}).get(student.uid)))
        writer.writerow(row)

    return buffer.getvalue()
