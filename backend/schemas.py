from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from models import Coordinate, SeatRequest


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class SchoolCreate(CamelModel):
    name: str
    address: Optional[str] = None


class StudentCreate(CamelModel):
    name: str
    class_id: Optional[int] = Field(None, alias="classId")


class ClassCreate(CamelModel):
    name: str
    section: Optional[str] = None


class TeacherCreate(CamelModel):
    name: str
    email: Optional[str] = None


class RoomAllocationCreate(CamelModel):
    room_name: str = Field(..., alias="roomName")
    rows: int
    columns: int
    students_per_bench: int = Field(1, alias="studentsPerBench")
    class_ids: List[int] = Field(default_factory=list, alias="classIds")


class AutoAssignRequest(CamelModel):
    student_ids: List[int] = Field(..., alias="studentIds")


class SeatAssignment(CamelModel):
    student_id: int = Field(..., alias="studentId")
    row: int
    column: int
    bench_position: Optional[int] = Field(None, alias="benchPosition")

    def to_request(self):
        return SeatRequest(self.student_id, Coordinate(self.row, self.column, self.bench_position or 1))


class AssignStudentsRequest(CamelModel):
    assignments: List[SeatAssignment]


class AssignTeachersRequest(CamelModel):
    teacher_ids: List[int] = Field(..., alias="teacherIds")


class PdfRequest(CamelModel):
    copies: int = 1
