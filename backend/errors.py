from models import OCCUPIED


class SeatingError(Exception):
    """Base for every rejection raised while seating students."""

    status_code = 400

    def __init__(self, message, **payload):
        super().__init__(message)
        self.message = message
        self.payload = payload

    def to_dict(self):
        return {"message": self.message, **self.payload}


class NotFoundError(SeatingError):
    status_code = 404


class ConfigurationError(SeatingError):
    pass


class InputError(SeatingError):
    def __init__(self, message, value=None):
        if value is None:
            super().__init__(message)
        else:
            super().__init__(message, value=value)
        self.value = value


class ConstraintViolationError(SeatingError):
    def __init__(self, violation, student_id, class_name=None):
        c = violation.coordinate
        if violation.rule == OCCUPIED:
            message = f"Position ({c.row}, {c.column}, {c.bench_position}) is already taken"
        else:
            message = f"Student from class {class_name or violation.class_id} {violation.message}"
        super().__init__(
            message,
            studentId=student_id,
            rule=violation.rule,
            position=c.as_dict(),
        )
        self.violation = violation
        self.student_id = student_id


class UnsatisfiablePlacementError(SeatingError):
    """Raised when the greedy scan leaves students without a seat.

    The placements computed for the rest of the batch travel with the
    error for diagnostics; they are never written.
    """

    def __init__(self, unassigned, placements):
        message = (
            f"Could not assign {len(unassigned)} student(s) due to seating constraints. "
            "Please remove some existing assignments or add more seats."
        )
        super().__init__(
            message,
            unassigned=[s.label for s in unassigned],
            partialAssignments=[p.as_dict() for p in placements],
        )
        self.unassigned = list(unassigned)
        self.placements = list(placements)
