from config import MAX_ROOM_CAPACITY
from errors import ConfigurationError
from models import Coordinate


class RoomGrid:
    """Dimensions of one room: ``rows`` x ``columns`` benches, each bench
    seating ``students_per_bench`` (1 or 2) students."""

    def __init__(self, rows, columns, students_per_bench=1, max_capacity=MAX_ROOM_CAPACITY):
        if rows < 1 or columns < 1:
            raise ConfigurationError("Rows and columns must be at least 1")
        if students_per_bench not in (1, 2):
            raise ConfigurationError(f"Invalid students per bench: {students_per_bench}")

        self.rows = rows
        self.columns = columns
        self.students_per_bench = students_per_bench

        if self.capacity > max_capacity:
            raise ConfigurationError(f"Room capacity cannot exceed {max_capacity} students")

    @classmethod
    def from_allocation(cls, room):
        return cls(room.rows, room.columns, room.students_per_bench)

    @property
    def capacity(self):
        return self.rows * self.columns * self.students_per_bench

    def is_in_range(self, row, column, bench_position=1):
        return (
            1 <= row <= self.rows
            and 1 <= column <= self.columns
            and 1 <= bench_position <= self.students_per_bench
        )

    def contains(self, coordinate):
        return self.is_in_range(coordinate.row, coordinate.column, coordinate.bench_position)

    def coordinates(self):
        """Every seat in scan order: row, then column, then bench position."""
        for row in range(1, self.rows + 1):
            for column in range(1, self.columns + 1):
                for bench_position in range(1, self.students_per_bench + 1):
                    yield Coordinate(row, column, bench_position)

    def adjacent_coordinates(self, coordinate):
        """Seats too close to ``coordinate`` to hold the same class.

        Single benches clash left, right, front and back. Double benches
        clash with the partner on the same bench and with both seats of the
        benches to the left and right; rows are separated by an aisle.
        """
        row, column = coordinate.row, coordinate.column

        if self.students_per_bench == 1:
            candidates = [
                Coordinate(row, column - 1, 1),
                Coordinate(row, column + 1, 1),
                Coordinate(row - 1, column, 1),
                Coordinate(row + 1, column, 1),
            ]
        else:
            other = 2 if coordinate.bench_position == 1 else 1
            candidates = [Coordinate(row, column, other)]
            for side in (column - 1, column + 1):
                candidates.append(Coordinate(row, side, 1))
                candidates.append(Coordinate(row, side, 2))

        return [c for c in candidates if self.contains(c)]

    def __repr__(self):
        return f"RoomGrid(rows={self.rows}, columns={self.columns}, students_per_bench={self.students_per_bench})"
