from models import (
    ADJACENT_SEAT,
    NEIGHBOURING_BENCH,
    OCCUPIED,
    SAME_BENCH,
    Occupant,
    Violation,
)


class AssignmentIndex:
    """Seat -> occupant map for one room, alive for a single request.

    Seeded from persisted assignments; tentative placements are added with
    :meth:`place` so that later students in the same batch see them.
    """

    def __init__(self):
        self._seats = {}

    @classmethod
    def build(cls, existing, exclude_students=()):
        """Index ``existing`` assignments, leaving out the students in
        ``exclude_students`` (they are about to be placed again)."""
        excluded = set(exclude_students)
        index = cls()
        for assignment in existing:
            if assignment.student_id in excluded:
                continue
            index.place(assignment.coordinate, assignment.student_id, assignment.class_id)
        return index

    def occupant(self, coordinate):
        return self._seats.get(coordinate)

    def place(self, coordinate, student_id, class_id):
        self._seats[coordinate] = Occupant(student_id, class_id)

    def items(self):
        return self._seats.items()

    def __contains__(self, coordinate):
        return coordinate in self._seats

    def __len__(self):
        return len(self._seats)


def _rule_for(grid, coordinate, neighbour):
    if grid.students_per_bench == 1:
        return ADJACENT_SEAT
    if (neighbour.row, neighbour.column) == (coordinate.row, coordinate.column):
        return SAME_BENCH
    return NEIGHBOURING_BENCH


def check_placement(index, grid, coordinate, class_id):
    """Return the :class:`Violation` placing ``class_id`` at ``coordinate``
    would cause, or ``None`` when the seat is free to take."""
    if index.occupant(coordinate) is not None:
        return Violation(coordinate, class_id, OCCUPIED, blocking=coordinate)

    if class_id is None:
        return None

    for neighbour in grid.adjacent_coordinates(coordinate):
        occupant = index.occupant(neighbour)
        if occupant is not None and occupant.class_id == class_id:
            return Violation(coordinate, class_id, _rule_for(grid, coordinate, neighbour), blocking=neighbour)

    return None


def is_available(index, grid, coordinate, class_id):
    return check_placement(index, grid, coordinate, class_id) is None
