from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base


class SchoolDB(Base):
    __tablename__ = "schools"

    id = Column(Integer, primary_key = True, index = True)
    name = Column(String, nullable = False)
    address = Column(String, nullable = True)


class ClassDB(Base):
    __tablename__ = "classes"
    __table_args__ = (UniqueConstraint("school_id", "name", "section"),)

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    section = Column(String, nullable=True)

    school_id = Column(Integer, ForeignKey("schools.id"), nullable=False, index=True)


class StudentDB(Base):
    __tablename__ = "students"

    id = Column(Integer, primary_key = True, index = True)
    stu_name = Column(String, nullable = False)

    school_id = Column(Integer, ForeignKey("schools.id"), nullable=False, index=True)
    # a student without a class never conflicts with anyone
    class_id = Column(Integer, ForeignKey("classes.id"), nullable=True)

    klass = relationship("ClassDB")


class TeacherDB(Base):
    __tablename__ = "teachers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=True)

    school_id = Column(Integer, ForeignKey("schools.id"), nullable=False, index=True)


class RoomAllocationDB(Base):
    __tablename__ = "room_allocations"
    __table_args__ = (UniqueConstraint("school_id", "room_name"),)

    id = Column(Integer, primary_key=True, index=True)
    room_name = Column(String, nullable=False)
    rows = Column(Integer, nullable=False)
    columns = Column(Integer, nullable=False)
    students_per_bench = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    school_id = Column(Integer, ForeignKey("schools.id"), nullable=False, index=True)
    school = relationship("SchoolDB")

    class_rooms = relationship("RoomClassDB", back_populates="room_allocation", cascade="all, delete")
    student_assignments = relationship(
        "RoomStudentAssignmentDB",
        back_populates="room_allocation",
        cascade="all, delete",
        order_by=lambda: [
            RoomStudentAssignmentDB.row_no,
            RoomStudentAssignmentDB.col_no,
            RoomStudentAssignmentDB.bench_position,
        ],
    )
    teacher_assignments = relationship("RoomTeacherAssignmentDB", back_populates="room_allocation", cascade="all, delete")


class RoomClassDB(Base):
    __tablename__ = "room_classes"
    __table_args__ = (UniqueConstraint("room_allocation_id", "class_id"),)

    id = Column(Integer, primary_key=True, index=True)

    room_allocation_id = Column(Integer, ForeignKey("room_allocations.id"), nullable=False)
    class_id = Column(Integer, ForeignKey("classes.id"), nullable=False)

    room_allocation = relationship("RoomAllocationDB", back_populates="class_rooms")
    klass = relationship("ClassDB")


class RoomStudentAssignmentDB(Base):
    __tablename__ = "room_student_assignments"
    __table_args__ = (
        UniqueConstraint("room_allocation_id", "row_no", "col_no", "bench_position", name="uq_room_seat"),
        UniqueConstraint("room_allocation_id", "student_id", name="uq_room_student"),
    )

    id = Column(Integer, primary_key=True, index=True)
    row_no = Column(Integer, nullable=False)
    col_no = Column(Integer, nullable=False)
    bench_position = Column(Integer, nullable=False, default=1)

    room_allocation_id = Column(Integer, ForeignKey("room_allocations.id"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False)

    room_allocation = relationship("RoomAllocationDB", back_populates="student_assignments")
    student = relationship("StudentDB")


class RoomTeacherAssignmentDB(Base):
    __tablename__ = "room_teacher_assignments"
    __table_args__ = (UniqueConstraint("room_allocation_id", "teacher_id"),)

    id = Column(Integer, primary_key=True, index=True)

    room_allocation_id = Column(Integer, ForeignKey("room_allocations.id"), nullable=False)
    teacher_id = Column(Integer, ForeignKey("teachers.id"), nullable=False)

    room_allocation = relationship("RoomAllocationDB", back_populates="teacher_assignments")
    teacher = relationship("TeacherDB")
