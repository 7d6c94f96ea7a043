"""Request-level seating operations.

Each function loads what it needs through :mod:`repository`, runs the pure
seating code in :mod:`allocator`, writes the result back as one replace and
drops the school's cached room listing. The school is always passed in
explicitly as a :class:`TenantContext`.
"""

import logging
import threading
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass

import repository
from allocator import allocate_students, check_student_ids, validate_seat_requests
from cache import invalidate, room_allocations_key
from errors import InputError
from layouts import RoomGrid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TenantContext:
    school_id: int


_locks_guard = threading.Lock()
_room_locks = defaultdict(threading.Lock)


@contextmanager
def room_lock(room_id):
    """Serialise read -> solve -> replace for one room within this process.

    Only taken for rooms already loaded, so the registry holds one lock per
    existing room.
    """
    with _locks_guard:
        lock = _room_locks[room_id]
    with lock:
        yield


def auto_assign_students(db, tenant, room_id, student_ids, cache):
    check_student_ids(student_ids)

    room = repository.load_room(db, room_id, tenant.school_id)
    grid = RoomGrid.from_allocation(room)

    with room_lock(room.id):
        students = repository.resolve_students(db, student_ids, tenant.school_id)
        existing = repository.load_assignments(db, room.id)

        placements = allocate_students(students, grid, existing)
        repository.replace_assignments(db, room.id, student_ids, placements)

    invalidate(cache, tenant.school_id)
    logger.info("Room %s: %d student(s) auto-assigned", room_id, len(placements))
    return placements


def assign_students(db, tenant, room_id, requests, cache):
    room = repository.load_room(db, room_id, tenant.school_id)
    grid = RoomGrid.from_allocation(room)

    with room_lock(room.id):
        existing = repository.load_assignments(db, room.id)

        resolved = []

        def resolve(ids):
            resolved.extend(repository.resolve_students(db, ids, tenant.school_id))
            return resolved

        names = _LazyClassNames(db, resolved)
        placements = validate_seat_requests(requests, grid, existing, resolve, class_names=names)

        student_ids = [r.student_id for r in requests]
        repository.replace_assignments(db, room.id, student_ids, placements)

    invalidate(cache, tenant.school_id)
    logger.info("Room %s: %d student(s) assigned manually", room_id, len(placements))
    return placements


class _LazyClassNames:
    """Class id -> name, only queried when a violation needs a message."""

    def __init__(self, db, students):
        self._db = db
        self._students = students
        self._names = None

    def get(self, class_id, default=None):
        if self._names is None:
            self._names = repository.class_names(self._db, [s.class_id for s in self._students])
        return self._names.get(class_id, default)


def create_room(db, tenant, room_name, rows, columns, students_per_bench, cache, class_ids=()):
    room_name = (room_name or "").strip()
    if not room_name:
        raise InputError("Room name, rows, and columns are required")

    grid = RoomGrid(rows, columns, 2 if students_per_bench == 2 else 1)

    if class_ids:
        repository.check_classes(db, class_ids, tenant.school_id)

    room = repository.create_room_allocation(db, tenant.school_id, room_name, grid, class_ids)
    invalidate(cache, tenant.school_id)
    logger.info("Created room allocation %s (%r) for school %s", room.id, grid, tenant.school_id)
    return room


def list_rooms(db, tenant, cache):
    key = room_allocations_key(tenant.school_id)
    cached = cache.get(key)
    if cached is not None:
        return cached

    rooms = [repository.room_to_dict(r) for r in repository.list_room_allocations(db, tenant.school_id)]
    cache.set(key, rooms)
    return rooms


def assign_teachers(db, tenant, room_id, teacher_ids, cache):
    if len(set(teacher_ids)) != len(teacher_ids):
        raise InputError("Duplicate teachers are not allowed", value=list(teacher_ids))

    room = repository.load_room(db, room_id, tenant.school_id)
    repository.resolve_teachers(db, teacher_ids, tenant.school_id)
    repository.replace_teachers(db, room.id, teacher_ids)

    invalidate(cache, tenant.school_id)
    return room
