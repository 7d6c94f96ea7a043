import logging

from errors import ConstraintViolationError, InputError, UnsatisfiablePlacementError
from models import Placement
from seat_index import AssignmentIndex, check_placement, is_available

logger = logging.getLogger(__name__)


def _group_by_class(students):
    groups = {}
    for student in students:
        groups.setdefault(student.class_id, []).append(student)
    return list(groups.values())


def check_student_ids(student_ids):
    """Reject an empty batch or one naming a student twice; return the ids as a set."""
    if not student_ids:
        raise InputError("Student IDs are required")

    seen = set()
    for student_id in student_ids:
        if student_id in seen:
            raise InputError("Duplicate students are not allowed", value=student_id)
        seen.add(student_id)
    return seen


def allocate_students(students, grid, existing=()):
    """Seat ``students`` greedily and return their placements.

    Students are grouped by class (first class seen goes first) and each one
    takes the first free seat in scan order that does not put it next to a
    classmate. Existing assignments of the same students are ignored so they
    get placed afresh. When anyone is left without a seat the whole batch
    fails with :class:`UnsatisfiablePlacementError`.
    """
    seen = check_student_ids([s.id for s in students])

    index = AssignmentIndex.build(existing, exclude_students=seen)

    placements = []
    unassigned = []

    for group in _group_by_class(students):
        for student in group:
            for coordinate in grid.coordinates():
                if is_available(index, grid, coordinate, student.class_id):
                    index.place(coordinate, student.id, student.class_id)
                    placements.append(Placement(student.id, coordinate))
                    break
            else:
                unassigned.append(student)

    if unassigned:
        logger.warning(
            "Auto-assignment left %d of %d student(s) without a seat in %r",
            len(unassigned), len(students), grid,
        )
        raise UnsatisfiablePlacementError(unassigned, placements)

    logger.info("Auto-assigned %d student(s) in %r", len(placements), grid)
    return placements


def check_seat_requests(requests, grid):
    """Structural checks on a manual batch, in input order: a student only
    once, seats inside the room, no seat asked for twice."""
    student_ids = set()
    positions = set()

    for request in requests:
        coordinate = request.coordinate

        if request.student_id in student_ids:
            raise InputError(f"Student {request.student_id} is assigned multiple times", value=request.student_id)
        student_ids.add(request.student_id)

        if not grid.is_in_range(coordinate.row, coordinate.column, 1):
            raise InputError(
                f"Invalid position: row {coordinate.row}, column {coordinate.column}",
                value=coordinate.as_dict(),
            )
        if not grid.contains(coordinate):
            raise InputError(f"Invalid bench position: {coordinate.bench_position}", value=coordinate.as_dict())

        if coordinate in positions:
            raise InputError(
                f"Position ({coordinate.row}, {coordinate.column}, {coordinate.bench_position}) is already assigned",
                value=coordinate.as_dict(),
            )
        positions.add(coordinate)


def validate_seat_requests(requests, grid, existing, resolve_students, class_names=None):
    """Check a caller-chosen batch of seats and return it as placements.

    ``resolve_students`` maps a list of student ids to :class:`StudentRef`
    objects and is only called once the batch is structurally sound. Every
    request is then replayed through the same availability test the
    automatic path uses, against the other students' existing seats plus
    the requests already accepted. The first violation rejects the batch.
    """
    check_seat_requests(requests, grid)

    student_ids = [r.student_id for r in requests]
    students = {s.id: s for s in resolve_students(student_ids)}

    index = AssignmentIndex.build(existing, exclude_students=student_ids)

    placements = []
    for request in requests:
        student = students[request.student_id]
        violation = check_placement(index, grid, request.coordinate, student.class_id)
        if violation is not None:
            class_name = (class_names or {}).get(student.class_id)
            logger.warning("Rejected manual seat for student %s: %s", student.id, violation.rule)
            raise ConstraintViolationError(violation, student.id, class_name)

        index.place(request.coordinate, student.id, student.class_id)
        placements.append(Placement(student.id, request.coordinate))

    logger.info("Validated %d manual seat(s) in %r", len(placements), grid)
    return placements
