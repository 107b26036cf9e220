"""
Per-student write locks.

Every mutation of a student row runs while holding that student's lock, so
within one process the read-modify-write of a student is linearized.
Requests for different students use different locks and never wait on each
other. Cross-process writers are still covered by the row version check in
the store.

Registry entries are reference counted: an entry exists only while some
caller holds or waits for its lock, so ids that never match a student (or
were deleted) do not accumulate.
"""

import threading
from contextlib import contextmanager
from typing import Dict, Optional

from gameprogress import config
from gameprogress.errors import Unavailable
from gameprogress.logging_config import get_logger, log_with_context

logger = get_logger("db")


class _LockEntry:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = threading.Lock()
        self.users = 0


_student_locks: Dict[str, _LockEntry] = {}
_student_locks_lock = threading.Lock()


def _checkout(student_id: str) -> _LockEntry:
    with _student_locks_lock:
        entry = _student_locks.get(student_id)
        if entry is None:
            entry = _LockEntry()
            _student_locks[student_id] = entry
        entry.users += 1
        return entry


def _checkin(student_id: str, entry: _LockEntry) -> None:
    with _student_locks_lock:
        entry.users -= 1
        if entry.users == 0:
            _student_locks.pop(student_id, None)


def active_lock_count() -> int:
    """Number of students that currently have a holder or waiter."""
    with _student_locks_lock:
        return len(_student_locks)


@contextmanager
def student_lock(student_id: str, timeout: Optional[float] = None):
    """
    Hold the student's write lock for the duration of the block.

    Raises Unavailable if the lock cannot be acquired within ``timeout``
    seconds (defaults to STORE_TIMEOUT_SECONDS).
    """
    wait = config.STORE_TIMEOUT_SECONDS if timeout is None else timeout
    entry = _checkout(student_id)
    try:
        if not entry.lock.acquire(timeout=wait):
            log_with_context(logger, "WARNING",
                "Timed out waiting for write lock on student {}".format(student_id),
                context={"student_id": student_id},
                extra_data={"timeout_s": wait})
            raise Unavailable("Student record is busy, please retry")
        try:
            yield
        finally:
            entry.lock.release()
    finally:
        _checkin(student_id, entry)
