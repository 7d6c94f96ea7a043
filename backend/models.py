from dataclasses import dataclass
from typing import Hashable, Optional


@dataclass(frozen=True, order=True)
class Coordinate:
    """One seat: ``(row, column, bench_position)``, all counted from 1."""

    row: int
    column: int
    bench_position: int = 1

    def as_dict(self):
        return {"row": self.row, "column": self.column, "benchPosition": self.bench_position}


@dataclass(frozen=True)
class Occupant:
    student_id: Hashable
    class_id: Optional[Hashable] = None


@dataclass(frozen=True)
class StudentRef:
    """A student resolved for seating. ``name`` is only used for reporting."""

    id: Hashable
    class_id: Optional[Hashable] = None
    name: Optional[str] = None

    @property
    def label(self):
        return self.name or str(self.id)


@dataclass(frozen=True)
class ExistingAssignment:
    student_id: Hashable
    class_id: Optional[Hashable]
    coordinate: Coordinate


@dataclass(frozen=True)
class SeatRequest:
    """A caller-chosen seat for one student on the manual path."""

    student_id: Hashable
    coordinate: Coordinate


@dataclass(frozen=True)
class Placement:
    student_id: Hashable
    coordinate: Coordinate

    def as_dict(self):
        return {"studentId": self.student_id, **self.coordinate.as_dict()}


# rule kinds reported by the constraint predicate
OCCUPIED = "occupied"
SAME_BENCH = "same-bench"
NEIGHBOURING_BENCH = "neighbouring-bench"
ADJACENT_SEAT = "single-seat-adjacent"

RULE_TEXT = {
    OCCUPIED: "seat is already taken",
    SAME_BENCH: "cannot be placed side-by-side on the same bench with another student from the same class",
    NEIGHBOURING_BENCH: "cannot be placed side-by-side with another student from the same class",
    ADJACENT_SEAT: "cannot be placed adjacent to another student from the same class (1 student per bench constraint)",
}


@dataclass(frozen=True)
class Violation:
    """Why a seat was refused: the seat asked for, the class being placed,
    the rule broken, and the seat holding the clashing occupant."""

    coordinate: Coordinate
    class_id: Optional[Hashable]
    rule: str
    blocking: Optional[Coordinate] = None

    @property
    def message(self):
        return RULE_TEXT[self.rule]
