import logging

import pandas as pd

import repository
from db_models import StudentDB
from errors import InputError

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = {"name", "class"}


def read_roster(file):
    """Read a roster sheet into a list of ``{name, class, section}`` rows."""
    try:
        df = pd.read_excel(file)
    except Exception as e:
        raise InputError(f"Excel read failed: {e}")

    df.columns = df.columns.astype(str).str.strip().str.lower()

    if not REQUIRED_COLUMNS.issubset(df.columns):
        missing = sorted(REQUIRED_COLUMNS - set(df.columns))
        raise InputError(f"Missing columns: {missing}", value=missing)

    roster = []
    for _, row in df.iterrows():
        name = row["name"]
        if pd.isna(name) or not str(name).strip():
            continue

        klass = row["class"]
        section = row["section"] if "section" in df.columns else None
        roster.append({
            "name": str(name).strip(),
            "class": None if pd.isna(klass) else str(klass).strip(),
            "section": None if section is None or pd.isna(section) else str(section).strip(),
        })

    return roster


def import_roster(db, school_id, roster):
    inserted = 0
    classes_created = 0

    for entry in roster:
        class_id = None
        if entry["class"]:
            klass, created = repository.get_or_create_class(db, school_id, entry["class"], entry["section"])
            class_id = klass.id
            classes_created += created

        db.add(StudentDB(stu_name=entry["name"], school_id=school_id, class_id=class_id))
        inserted += 1

    db.commit()
    logger.info("Imported %d student(s), %d new class(es) for school %s", inserted, classes_created, school_id)

    return {"inserted": inserted, "classes_created": classes_created}
