import logging

from sqlalchemy.orm import Session

from db_models import (
    ClassDB,
    RoomAllocationDB,
    RoomClassDB,
    RoomStudentAssignmentDB,
    RoomTeacherAssignmentDB,
    SchoolDB,
    StudentDB,
    TeacherDB,
)
from errors import InputError, NotFoundError
from models import Coordinate, ExistingAssignment, StudentRef

logger = logging.getLogger(__name__)


def get_school(db: Session, school_id):
    school = db.query(SchoolDB).filter(SchoolDB.id == school_id).first()
    if not school:
        raise NotFoundError("School not found")
    return school


def load_room(db: Session, room_id, school_id):
    room = (
        db.query(RoomAllocationDB)
        .filter(RoomAllocationDB.id == room_id)
        .filter(RoomAllocationDB.school_id == school_id)
        .first()
    )
    if not room:
        raise NotFoundError("Room allocation not found")
    return room


def load_assignments(db: Session, room_id):
    rows = (
        db.query(RoomStudentAssignmentDB, StudentDB)
        .join(StudentDB, RoomStudentAssignmentDB.student_id == StudentDB.id)
        .filter(RoomStudentAssignmentDB.room_allocation_id == room_id)
        .order_by(
            RoomStudentAssignmentDB.row_no,
            RoomStudentAssignmentDB.col_no,
            RoomStudentAssignmentDB.bench_position,
        )
        .all()
    )
    return [
        ExistingAssignment(
            student_id=a.student_id,
            class_id=s.class_id,
            coordinate=Coordinate(a.row_no, a.col_no, a.bench_position),
        )
        for a, s in rows
    ]


def resolve_students(db: Session, student_ids, school_id):
    """Look up ``student_ids`` within the school, in the order given.

    Raises :class:`InputError` naming the ids that do not resolve.
    """
    found = (
        db.query(StudentDB)
        .filter(StudentDB.id.in_(list(student_ids)))
        .filter(StudentDB.school_id == school_id)
        .all()
    )
    by_id = {s.id: s for s in found}

    missing = [sid for sid in student_ids if sid not in by_id]
    if missing:
        raise InputError("Some students not found", value=missing)

    return [StudentRef(id=sid, class_id=by_id[sid].class_id, name=by_id[sid].stu_name) for sid in student_ids]


def class_names(db: Session, class_ids):
    ids = [c for c in set(class_ids) if c is not None]
    if not ids:
        return {}
    return {c.id: c.name for c in db.query(ClassDB).filter(ClassDB.id.in_(ids)).all()}


def replace_assignments(db: Session, room_id, student_ids, placements):
    """Delete the seats held by ``student_ids`` in the room and insert
    ``placements`` in one transaction."""
    try:
        (
            db.query(RoomStudentAssignmentDB)
            .filter(RoomStudentAssignmentDB.room_allocation_id == room_id)
            .filter(RoomStudentAssignmentDB.student_id.in_(list(student_ids)))
            .delete(synchronize_session=False)
        )
        # the deletes must hit the table before seats they freed are reused
        db.flush()

        db.add_all(
            RoomStudentAssignmentDB(
                room_allocation_id=room_id,
                student_id=p.student_id,
                row_no=p.coordinate.row,
                col_no=p.coordinate.column,
                bench_position=p.coordinate.bench_position,
            )
            for p in placements
        )
        db.commit()
    except Exception:
        logger.exception("Replacing seats in room %s failed", room_id)
        db.rollback()
        raise


def create_school(db: Session, name, address=None):
    school = SchoolDB(name=name.strip(), address=address)
    db.add(school)
    db.commit()
    db.refresh(school)
    return school


def get_or_create_class(db: Session, school_id, name, section=None):
    klass = (
        db.query(ClassDB)
        .filter(ClassDB.school_id == school_id)
        .filter(ClassDB.name == name)
        .filter(ClassDB.section == section)
        .first()
    )
    if klass:
        return klass, False

    klass = ClassDB(school_id=school_id, name=name, section=section)
    db.add(klass)
    db.flush()
    return klass, True


def check_classes(db: Session, class_ids, school_id):
    found = (
        db.query(ClassDB)
        .filter(ClassDB.id.in_(list(class_ids)))
        .filter(ClassDB.school_id == school_id)
        .count()
    )
    if found != len(set(class_ids)):
        raise InputError("Some classes not found or don't belong to your school", value=list(class_ids))


def create_room_allocation(db: Session, school_id, room_name, grid, class_ids=()):
    room = RoomAllocationDB(
        school_id=school_id,
        room_name=room_name,
        rows=grid.rows,
        columns=grid.columns,
        students_per_bench=grid.students_per_bench,
    )
    room.class_rooms = [RoomClassDB(class_id=cid) for cid in dict.fromkeys(class_ids)]
    try:
        db.add(room)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(room)
    return room


def list_room_allocations(db: Session, school_id):
    return (
        db.query(RoomAllocationDB)
        .filter(RoomAllocationDB.school_id == school_id)
        .order_by(RoomAllocationDB.created_at.desc(), RoomAllocationDB.id.desc())
        .all()
    )


def resolve_teachers(db: Session, teacher_ids, school_id):
    teachers = (
        db.query(TeacherDB)
        .filter(TeacherDB.id.in_(list(teacher_ids)))
        .filter(TeacherDB.school_id == school_id)
        .all()
    )
    if len(teachers) != len(teacher_ids):
        raise InputError("Some teachers not found or don't belong to your school", value=list(teacher_ids))
    return teachers


def replace_teachers(db: Session, room_id, teacher_ids):
    try:
        db.query(RoomTeacherAssignmentDB).filter(
            RoomTeacherAssignmentDB.room_allocation_id == room_id
        ).delete(synchronize_session=False)
        db.flush()
        db.add_all(RoomTeacherAssignmentDB(room_allocation_id=room_id, teacher_id=tid) for tid in teacher_ids)
        db.commit()
    except Exception:
        db.rollback()
        raise


def room_to_dict(room):
    return {
        "id": room.id,
        "roomName": room.room_name,
        "rows": room.rows,
        "columns": room.columns,
        "studentsPerBench": room.students_per_bench,
        "capacity": room.rows * room.columns * room.students_per_bench,
        "createdAt": room.created_at.isoformat() if room.created_at else None,
        "classes": [
            {"id": cr.klass.id, "name": cr.klass.name, "section": cr.klass.section}
            for cr in room.class_rooms
        ],
        "studentAssignments": [
            {
                "studentId": a.student_id,
                "studentName": a.student.stu_name,
                "classId": a.student.class_id,
                "className": a.student.klass.name if a.student.klass else None,
                "row": a.row_no,
                "column": a.col_no,
                "benchPosition": a.bench_position,
            }
            for a in room.student_assignments
        ],
        "teachers": [
            {"id": ta.teacher.id, "name": ta.teacher.name, "email": ta.teacher.email}
            for ta in room.teacher_assignments
        ],
    }
