import logging
import math
from collections.abc import Iterable, Mapping
from datetime import date, datetime, time, timezone, tzinfo
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.config import SCHOOL_TIMEZONE
from app.models import (
    SchoolClass,
    Snapshot,
    Submission,
    Task,
    User,
    UserRole,
    UserStatus,
)

logger = logging.getLogger(__name__)

USER_TIMESTAMP_FIELDS = ("createdAt",)
CLASS_TIMESTAMP_FIELDS = ("createdAt",)
TASK_TIMESTAMP_FIELDS = ("deadline", "createdAt")
SUBMISSION_TIMESTAMP_FIELDS = ("submittedAt", "gradedAt")

# method names exposed by server timestamp objects
_TIMESTAMP_CONVERTERS = ("to_datetime", "toDate", "to_date")


def school_timezone() -> tzinfo:
    try:
        return ZoneInfo(SCHOOL_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown SCHOOL_TIMEZONE %r, falling back to UTC", SCHOOL_TIMEZONE)
        return timezone.utc


def _to_utc(value: datetime, tz: tzinfo) -> Optional[datetime]:
    if value.tzinfo is None:
        value = value.replace(tzinfo=tz)
    try:
        return value.astimezone(timezone.utc)
    except OverflowError:
        logger.debug("Timestamp %s is out of range in UTC", value)
        return None


def _from_epoch(seconds: float) -> Optional[datetime]:
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def normalize_timestamp(value: Any, tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """
    Convert any timestamp-like value into an aware UTC datetime.

    Accepted shapes:
        - server timestamp objects exposing to_datetime() / toDate() / to_date()
        - serialized server timestamps {"seconds": .., "nanoseconds": ..}
        - ISO-8601 strings (a trailing "Z" is allowed)
        - datetime / date values
        - epoch milliseconds

    Naive values are read in `tz` (defaults to the school timezone).
    Returns None for absent or unparseable values; never raises.
    """
    if value is None or isinstance(value, bool):
        return None

    tz = tz or school_timezone()

    for attr in _TIMESTAMP_CONVERTERS:
        converter = getattr(value, attr, None)
        if callable(converter):
            try:
                value = converter()
            except Exception:
                logger.debug("Timestamp converter %s failed", attr, exc_info=True)
                return None
            break

    if isinstance(value, datetime):
        return _to_utc(value, tz)

    if isinstance(value, date):
        return _to_utc(datetime.combine(value, time.min), tz)

    if isinstance(value, Mapping):
        seconds = value.get("seconds", value.get("_seconds"))
        nanos = value.get("nanoseconds", value.get("_nanoseconds", 0)) or 0
        if not isinstance(nanos, (int, float)):
            nanos = 0
        if isinstance(seconds, (int, float)) and not isinstance(seconds, bool):
            return _from_epoch(seconds + nanos / 1e9)
        return None

    if isinstance(value, (int, float)):
        return _from_epoch(value / 1000)

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            return _to_utc(datetime.fromisoformat(text), tz)
        except ValueError:
            logger.debug("Unparseable timestamp string %r", value)
            return None

    logger.debug("Unsupported timestamp type %s", type(value).__name__)
    return None


def normalize_record(record: Mapping, fields: Iterable[str], tz: Optional[tzinfo] = None) -> dict:
    """
    Return a shallow copy of `record` with every named field normalized.
    Fields missing from the record are left missing.
    """
    if not isinstance(record, Mapping):
        raise TypeError(f"record must be a mapping, got {type(record).__name__}")
    if isinstance(fields, str):
        raise TypeError("fields must be an iterable of field names, not a single string")

    normalized = dict(record)
    for field in fields:
        if field in normalized:
            normalized[field] = normalize_timestamp(normalized[field], tz)
    return normalized


# ---------------------------
# Field helpers
# ---------------------------
def _pick(record: Mapping, *keys: str, default: Any = None) -> Any:
    """First present, non-None value among camelCase / snake_case aliases."""
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return default


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _grade(value: Any) -> Optional[int | float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if not isinstance(value, (int, float)):
        return None
    try:
        finite = math.isfinite(value)
    except OverflowError:  # int too large for a float
        return None
    if not finite:
        return None
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _enum(enum_cls, value: Any, default):
    try:
        return enum_cls(str(value).lower()) if value is not None else default
    except ValueError:
        return default


# ---------------------------
# Entity normalizers
# ---------------------------
def normalize_user(raw: Mapping, tz: Optional[tzinfo] = None) -> Optional[User]:
    record = normalize_record(raw, USER_TIMESTAMP_FIELDS + ("created_at",), tz)
    doc_id = _text(_pick(record, "id"))
    uid = _text(_pick(record, "uid"))
    if not doc_id and not uid:
        return None

    return User(
        id=doc_id or uid,
        uid=uid or doc_id,
        name=_text(_pick(record, "name")) or "",
        email=_text(_pick(record, "email")),
        role=_enum(UserRole, _pick(record, "role"), UserRole.STUDENT),
        class_id=_text(_pick(record, "classId", "class_id")),
        status=_enum(UserStatus, _pick(record, "status"), UserStatus.ACTIVE),
        created_at=_pick(record, "createdAt", "created_at"),
    )


def normalize_class(raw: Mapping, tz: Optional[tzinfo] = None) -> Optional[SchoolClass]:
    record = normalize_record(raw, CLASS_TIMESTAMP_FIELDS + ("created_at",), tz)
    class_id = _text(_pick(record, "id"))
    if not class_id:
        return None

    return SchoolClass(
        id=class_id,
        name=_text(_pick(record, "name")) or "",
        subject=_text(_pick(record, "subject")),
        created_by=_text(_pick(record, "createdBy", "created_by")),
        created_at=_pick(record, "createdAt", "created_at"),
    )


def normalize_task(raw: Mapping, tz: Optional[tzinfo] = None) -> Optional[Task]:
    record = normalize_record(raw, TASK_TIMESTAMP_FIELDS + ("created_at",), tz)
    task_id = _text(_pick(record, "id"))
    if not task_id:
        return None

    assigned = _pick(record, "assignedClasses", "assigned_classes", default=[])
    if isinstance(assigned, str):
        assigned = [assigned]
    elif not isinstance(assigned, Iterable):
        assigned = []
    assigned_classes = list(dict.fromkeys(c for c in (_text(a) for a in assigned) if c))

    return Task(
        id=task_id,
        title=_text(_pick(record, "title")) or "",
        description=_text(_pick(record, "description")),
        deadline=_pick(record, "deadline"),
        assigned_classes=assigned_classes,
        created_by=_text(_pick(record, "createdBy", "created_by")),
        created_at=_pick(record, "createdAt", "created_at"),
    )


def normalize_submission(raw: Mapping, tz: Optional[tzinfo] = None) -> Optional[Submission]:
    record = normalize_record(
        raw, SUBMISSION_TIMESTAMP_FIELDS + ("submitted_at", "graded_at"), tz
    )
    submission_id = _text(_pick(record, "id"))
    task_id = _text(_pick(record, "taskId", "task_id"))
    student_id = _text(_pick(record, "studentId", "student_id"))
    if not submission_id or not task_id or not student_id:
        return None

    return Submission(
        id=submission_id,
        task_id=task_id,
        student_id=student_id,
        student_name=_text(_pick(record, "studentName", "student_name")),
        content=_text(_pick(record, "content")),
        submitted_at=_pick(record, "submittedAt", "submitted_at"),
        grade=_grade(_pick(record, "grade")),
        teacher_comment=_text(_pick(record, "teacherComment", "teacher_comment")),
        graded_at=_pick(record, "gradedAt", "graded_at"),
    )


def _normalize_collection(name: str, records: Iterable[Any], normalizer, tz: tzinfo) -> list:
    items = []
    for raw in records or []:
        if not isinstance(raw, Mapping):
            logger.warning("Skipping %s record of type %s", name, type(raw).__name__)
            continue
        item = normalizer(raw, tz)
        if item is None:
            logger.warning("Skipping %s record without an id: %r", name, raw.get("id"))
            continue
        items.append(item)
    return items


def build_identity_aliases(users: Iterable[User]) -> dict[str, str]:
    """
    Map both historical identifiers (document id and auth uid) of every user
    to the canonical one.
    """
    aliases: dict[str, str] = {}
    for user in users:
        aliases[user.id] = user.uid
        aliases[user.uid] = user.uid
    return aliases


def normalize_snapshot(raw: Mapping, tz: Optional[tzinfo] = None) -> Snapshot:
    """
    Normalize a raw {users, classes, tasks, submissions} snapshot.

    Submission.student_id is rewritten to the student's canonical id, so
    downstream joins compare a single identifier.
    """
    if not isinstance(raw, Mapping):
        raise TypeError(f"snapshot must be a mapping, got {type(raw).__name__}")

    tz = tz or school_timezone()

    users = _normalize_collection("user", raw.get("users"), normalize_user, tz)
    classes = _normalize_collection("class", raw.get("classes"), normalize_class, tz)
    tasks = _normalize_collection("task", raw.get("tasks"), normalize_task, tz)
    submissions = _normalize_collection(
        "submission", raw.get("submissions"), normalize_submission, tz
    )

    aliases = build_identity_aliases(users)
    for submission in submissions:
        submission.student_id = aliases.get(submission.student_id, submission.student_id)

    return Snapshot(users=users, classes=classes, tasks=tasks, submissions=submissions)
