import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import main_api
from cache import ResponseCache, get_cache
from database import Base, get_db, make_engine
from db_models import ClassDB, RoomAllocationDB, SchoolDB, StudentDB, TeacherDB


class Seeder:
    """Shortcuts for putting rows straight into the test database."""

    def __init__(self, db):
        self.db = db

    def _add(self, obj):
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def school(self, name="Springfield Elementary"):
        return self._add(SchoolDB(name=name, address="19 Plympton St"))

    def klass(self, school, name, section=None):
        return self._add(ClassDB(school_id=school.id, name=name, section=section))

    def student(self, school, name, klass=None):
        return self._add(StudentDB(school_id=school.id, stu_name=name, class_id=klass.id if klass else None))

    def teacher(self, school, name):
        return self._add(TeacherDB(school_id=school.id, name=name, email=f"{name.lower()}@school.test"))

    def room(self, school, rows, columns, students_per_bench=1, name="Hall A"):
        return self._add(
            RoomAllocationDB(
                school_id=school.id,
                room_name=name,
                rows=rows,
                columns=columns,
                students_per_bench=students_per_bench,
            )
        )


@pytest.fixture
def session_factory():
    engine = make_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seed(db):
    return Seeder(db)


@pytest.fixture
def file_session_factory(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'seating.db'}")
    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        engine.dispose()


@pytest.fixture
def file_seed(file_session_factory):
    session = file_session_factory()
    try:
        yield Seeder(session)
    finally:
        session.close()


@pytest.fixture
def cache():
    return ResponseCache(ttl=300)


@pytest.fixture
def client(session_factory, cache):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    main_api.app.dependency_overrides[get_db] = override_get_db
    main_api.app.dependency_overrides[get_cache] = lambda: cache
    try:
        yield TestClient(main_api.app)
    finally:
        main_api.app.dependency_overrides.clear()
