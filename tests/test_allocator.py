"""Tests for the greedy automatic seating of students."""

import itertools

import pytest

from allocator import allocate_students
from errors import InputError, UnsatisfiablePlacementError
from layouts import RoomGrid
from models import Coordinate, ExistingAssignment, StudentRef
from seat_index import AssignmentIndex, check_placement, is_available


def _student(identifier, class_id, name=None):
    return StudentRef(id=identifier, class_id=class_id, name=name)


def _seats(placements):
    return {p.student_id: (p.coordinate.row, p.coordinate.column, p.coordinate.bench_position) for p in placements}


def assert_no_conflicts(grid, placements, classes, existing=()):
    seated = {}
    for a in existing:
        seated[a.coordinate] = a.class_id
    for p in placements:
        assert p.coordinate not in seated, f"{p.coordinate} taken twice"
        assert grid.contains(p.coordinate)
        seated[p.coordinate] = classes[p.student_id]

    for coordinate, class_id in seated.items():
        if class_id is None:
            continue
        for neighbour in grid.adjacent_coordinates(coordinate):
            assert seated.get(neighbour) != class_id, f"{coordinate} and {neighbour} share class {class_id}"


def test_one_per_bench_row_spreads_same_class():
    grid = RoomGrid(1, 3, 1)
    students = [_student("S1", "X"), _student("S2", "X"), _student("S3", "Y")]

    placements = allocate_students(students, grid)

    assert _seats(placements) == {"S1": (1, 1, 1), "S2": (1, 3, 1), "S3": (1, 2, 1)}
    assert [p.student_id for p in placements] == ["S1", "S2", "S3"]


def test_students_grouped_by_first_seen_class():
    grid = RoomGrid(1, 4, 1)
    students = [_student(1, "X"), _student(2, "Y"), _student(3, "X")]

    placements = allocate_students(students, grid)

    assert [p.student_id for p in placements] == [1, 3, 2]
    assert _seats(placements) == {1: (1, 1, 1), 3: (1, 3, 1), 2: (1, 2, 1)}


CLASS_MIXES = [
    ("X", "X", "Y", "Y"),
    ("X", "Y", "X", "Y"),
    ("X", "Y", "Z", "W"),
    ("X", "Y", "Z", None),
    (None, None, None, None),
    ("X", None, "X", None),
]


@pytest.mark.parametrize("mix", CLASS_MIXES)
def test_two_per_bench_two_columns(mix):
    # in a 1x2 room of double benches every seat touches every other seat
    grid = RoomGrid(1, 2, 2)
    students = [_student(i, c) for i, c in enumerate(mix, start=1)]
    classes = {s.id: s.class_id for s in students}
    repeated = any(mix.count(c) > 1 for c in mix if c is not None)

    if repeated:
        with pytest.raises(UnsatisfiablePlacementError) as exc:
            allocate_students(students, grid)
        assert_no_conflicts(grid, exc.value.placements, classes)
    else:
        placements = allocate_students(students, grid)
        assert len(placements) == 4
        assert_no_conflicts(grid, placements, classes)


def test_unsatisfiable_batch_reports_unassigned_and_partial_placements():
    grid = RoomGrid(1, 2, 2)
    students = [
        _student(1, "X", "Ada"),
        _student(2, "X", "Grace"),
        _student(3, "Y", "Alan"),
        _student(4, "Y"),
    ]

    with pytest.raises(UnsatisfiablePlacementError) as exc:
        allocate_students(students, grid)

    err = exc.value
    assert [s.id for s in err.unassigned] == [2, 4]
    assert _seats(err.placements) == {1: (1, 1, 1), 3: (1, 1, 2)}
    body = err.to_dict()
    assert body["unassigned"] == ["Grace", "4"]
    assert body["partialAssignments"][0] == {"studentId": 1, "row": 1, "column": 1, "benchPosition": 1}
    assert body["message"].startswith("Could not assign 2 student(s)")


def test_single_bench_fills_checkerboard_then_runs_out():
    grid = RoomGrid(3, 3, 1)
    students = [_student(i, "X") for i in range(1, 6)]

    placements = allocate_students(students, grid)
    assert sorted(_seats(placements).values()) == [
        (1, 1, 1), (1, 3, 1), (2, 2, 1), (3, 1, 1), (3, 3, 1),
    ]

    with pytest.raises(UnsatisfiablePlacementError) as exc:
        allocate_students(students + [_student(6, "X")], grid)
    assert [s.id for s in exc.value.unassigned] == [6]


def test_mixed_classes_in_double_bench_room_never_clash():
    grid = RoomGrid(4, 5, 2)
    cycle = itertools.cycle(["A", "B", "C"])
    students = [_student(i, next(cycle)) for i in range(1, 25)]
    classes = {s.id: s.class_id for s in students}

    placements = allocate_students(students, grid)

    assert len(placements) == 24
    assert_no_conflicts(grid, placements, classes)


def test_same_input_gives_same_seats():
    grid = RoomGrid(3, 4, 2)
    students = [_student(i, "XYZ"[i % 3]) for i in range(1, 13)]

    first = allocate_students(students, grid)
    second = allocate_students(students, grid)

    assert first == second


def test_existing_seats_are_respected():
    grid = RoomGrid(1, 3, 1)
    existing = [ExistingAssignment("old", "Y", Coordinate(1, 1, 1))]

    placements = allocate_students([_student("new", "Y"), _student("other", "X")], grid, existing)

    assert _seats(placements) == {"new": (1, 3, 1), "other": (1, 2, 1)}
    assert_no_conflicts(grid, placements, {"new": "Y", "other": "X"}, existing)


def test_students_being_reassigned_give_up_their_old_seat():
    grid = RoomGrid(1, 3, 1)
    existing = [
        ExistingAssignment("S1", "X", Coordinate(1, 3, 1)),
        ExistingAssignment("S2", "Y", Coordinate(1, 2, 1)),
    ]

    placements = allocate_students([_student("S1", "X")], grid, existing)

    assert _seats(placements) == {"S1": (1, 1, 1)}


def test_students_without_class_never_conflict():
    grid = RoomGrid(1, 3, 1)
    placements = allocate_students([_student(i, None) for i in range(3)], grid)
    assert _seats(placements) == {0: (1, 1, 1), 1: (1, 2, 1), 2: (1, 3, 1)}


def test_duplicate_students_are_rejected():
    with pytest.raises(InputError) as exc:
        allocate_students([_student(1, "X"), _student(1, "X")], RoomGrid(2, 2, 1))
    assert exc.value.value == 1


def test_empty_batch_is_rejected():
    with pytest.raises(InputError):
        allocate_students([], RoomGrid(2, 2, 1))


def test_predicate_reports_the_rule_broken():
    grid = RoomGrid(2, 3, 2)
    index = AssignmentIndex.build([ExistingAssignment(1, "X", Coordinate(1, 2, 1))])

    assert check_placement(index, grid, Coordinate(1, 2, 1), "Y").rule == "occupied"
    assert check_placement(index, grid, Coordinate(1, 2, 2), "X").rule == "same-bench"
    violation = check_placement(index, grid, Coordinate(1, 3, 2), "X")
    assert violation.rule == "neighbouring-bench"
    assert violation.blocking == Coordinate(1, 2, 1)
    assert is_available(index, grid, Coordinate(2, 2, 1), "X")
    assert is_available(index, grid, Coordinate(1, 2, 2), None)
