import logging
from typing import Optional

from fastapi import FastAPI, Depends, File, Header, HTTPException, UploadFile
from fastapi.responses import JSONResponse, Response
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import repository
import service
from cache import get_cache
from config import LOG_LEVEL
from database import Base, engine, get_db
from db_models import ClassDB, StudentDB, TeacherDB
from errors import SeatingError
from pdf_export import content_disposition, render_seating_chart
from schemas import (
    AssignStudentsRequest,
    AssignTeachersRequest,
    AutoAssignRequest,
    ClassCreate,
    PdfRequest,
    RoomAllocationCreate,
    SchoolCreate,
    StudentCreate,
    TeacherCreate,
)
from student_import import import_roster, read_roster

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)


app = FastAPI(title = "Room Seating API")

Base.metadata.create_all(bind = engine)


@app.exception_handler(SeatingError)
async def seating_error_handler(request, exc: SeatingError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request, exc: IntegrityError):
    logger.warning("Integrity error on %s: %s", request.url.path, exc.orig)
    return JSONResponse(status_code=400, content={"message": "Duplicate assignment detected"})


def get_tenant(x_school_id: Optional[int] = Header(None), db: Session = Depends(get_db)):
    if x_school_id is None:
        raise HTTPException(status_code=400, detail="School not found in session")
    school = repository.get_school(db, x_school_id)
    return service.TenantContext(school_id=school.id)


@app.get("/")
def root():
    return {"message": "Room Seating API is running !"}


@app.post("/schools", status_code=201)
def create_school(body: SchoolCreate, db: Session = Depends(get_db)):
    school = repository.create_school(db, body.name, body.address)
    return {"id": school.id, "name": school.name, "address": school.address}


@app.get("/classes")
def get_classes(tenant: service.TenantContext = Depends(get_tenant), db: Session = Depends(get_db)):
    classes = db.query(ClassDB).filter(ClassDB.school_id == tenant.school_id).order_by(ClassDB.name).all()
    return [{"id": c.id, "name": c.name, "section": c.section} for c in classes]


@app.post("/classes", status_code=201)
def create_class(
    body: ClassCreate,
    tenant: service.TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    klass, created = repository.get_or_create_class(db, tenant.school_id, body.name.strip(), body.section)
    db.commit()
    return {"id": klass.id, "name": klass.name, "section": klass.section, "created": created}


@app.get("/students")
def get_students(tenant: service.TenantContext = Depends(get_tenant), db: Session = Depends(get_db)):
    students = db.query(StudentDB).filter(StudentDB.school_id == tenant.school_id).order_by(StudentDB.id).all()
    return [
        {
            "id": s.id,
            "name": s.stu_name,
            "classId": s.class_id,
            "className": s.klass.name if s.klass else None,
        }
        for s in students
    ]


@app.post("/students", status_code=201)
def create_student(
    body: StudentCreate,
    tenant: service.TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    if body.class_id is not None:
        repository.check_classes(db, [body.class_id], tenant.school_id)

    student = StudentDB(stu_name=body.name.strip(), class_id=body.class_id, school_id=tenant.school_id)
    db.add(student)
    db.commit()
    db.refresh(student)
    return {"id": student.id, "name": student.stu_name, "classId": student.class_id}


@app.post("/students/import")
def import_students_from_excel(
    file: UploadFile = File(...),
    tenant: service.TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    roster = read_roster(file.file)
    result = import_roster(db, tenant.school_id, roster)

    return {"message": "Student import completed ✅", **result}


@app.post("/teachers", status_code=201)
def create_teacher(
    body: TeacherCreate,
    tenant: service.TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    teacher = TeacherDB(name=body.name.strip(), email=body.email, school_id=tenant.school_id)
    db.add(teacher)
    db.commit()
    db.refresh(teacher)
    return {"id": teacher.id, "name": teacher.name, "email": teacher.email}


@app.post("/room-allocations", status_code=201)
def create_room_allocation(
    body: RoomAllocationCreate,
    tenant: service.TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
    cache=Depends(get_cache),
):
    try:
        room = service.create_room(
            db,
            tenant,
            body.room_name,
            body.rows,
            body.columns,
            body.students_per_bench,
            cache,
            class_ids=body.class_ids,
        )
    except IntegrityError:
        raise HTTPException(status_code=400, detail="Room with this name already exists")

    return {
        "message": "Room allocation created successfully",
        "roomAllocation": repository.room_to_dict(room),
    }


@app.get("/room-allocations")
def get_room_allocations(
    tenant: service.TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
    cache=Depends(get_cache),
):
    return {"roomAllocations": service.list_rooms(db, tenant, cache)}


@app.post("/room-allocations/{room_id}/auto-assign")
def auto_assign(
    room_id: int,
    req: AutoAssignRequest,
    tenant: service.TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
    cache=Depends(get_cache),
):
    placements = service.auto_assign_students(db, tenant, room_id, req.student_ids, cache)

    return {
        "message": f"Successfully assigned {len(placements)} student(s)",
        "assignments": [p.as_dict() for p in placements],
    }


@app.post("/room-allocations/{room_id}/assign-students")
def assign_students(
    room_id: int,
    req: AssignStudentsRequest,
    tenant: service.TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
    cache=Depends(get_cache),
):
    requests = [a.to_request() for a in req.assignments]
    service.assign_students(db, tenant, room_id, requests, cache)

    return {"message": "Students assigned successfully"}


@app.post("/room-allocations/{room_id}/assign-teachers")
def assign_teachers(
    room_id: int,
    req: AssignTeachersRequest,
    tenant: service.TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
    cache=Depends(get_cache),
):
    service.assign_teachers(db, tenant, room_id, req.teacher_ids, cache)
    return {"message": "Teachers assigned successfully"}


@app.post("/room-allocations/{room_id}/pdf")
def export_seating_pdf(
    room_id: int,
    req: Optional[PdfRequest] = None,
    tenant: service.TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    room = repository.load_room(db, room_id, tenant.school_id)
    pdf = render_seating_chart(room, req.copies if req else 1)

    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": content_disposition(room.room_name)},
    )
