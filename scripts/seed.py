"""Seed demo actors and a first activity entry for local development."""
from __future__ import annotations

from dotenv import load_dotenv

load_dotenv()

from proteq import db, models
from proteq.config import get_settings
from proteq.services.activity_logger import ActorKind, log_activity
from proteq.utils.passwords import hash_password

DEMO_PASSWORD = "ChangeMe123"


def main() -> None:
    settings = get_settings()
    print(f"Using database: {settings.database_url}")

    db.create_all()
    session = db.get_sessionmaker()()

    try:
        password_hash = hash_password(DEMO_PASSWORD)
        admin = models.Admin(name="MDRRMO Admin", email="admin@proteq.ph", password_hash=password_hash)
        staff = models.Staff(
            name="Field Responder",
            email="responder@proteq.ph",
            password_hash=password_hash,
            position="Responder",
            department="Rescue",
        )
        citizen = models.GeneralUser(
            first_name="Juan",
            last_name="Dela Cruz",
            email="juan@proteq.ph",
            password_hash=password_hash,
        )
        session.add_all([admin, staff, citizen])
        session.commit()

        log_activity(session, ActorKind.ADMIN, admin.id, "seed_data_created", details="Demo actors created")
        session.commit()
        print(f"Seed data inserted. Demo password for every account: {DEMO_PASSWORD}")
    finally:
        session.close()


if __name__ == "__main__":
    main()
