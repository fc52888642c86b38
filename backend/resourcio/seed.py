"""
Seed script for Resourcio — creates the first admin login and, optionally,
the demo dataset that also backs RESOURCIO_DATA_BACKEND=memory.

Run: python -m resourcio.seed [--demo]
"""
import logging
import os
import sys

from resourcio import config
from resourcio.database import SessionLocal
from resourcio.demo_data import DEMO_ALLOCATIONS, DEMO_PROJECTS, DEMO_RESOURCES
from resourcio.models.allocation import ResourceAllocation
from resourcio.models.project import Project
from resourcio.models.resource import Resource
from resourcio.models.user import User, UserRole
from resourcio.services.auth import hash_password
from resourcio.services.rbac import Role

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)

ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@resourcio.local")
ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "Resourcio@2025!")


def seed_admin(db):
    """Create the admin user if it doesn't exist."""
    user = db.query(User).filter(User.email == ADMIN_EMAIL).first()
    if user:
        logger.info("Admin user already exists, skipping.")
        return user

    user = User(email=ADMIN_EMAIL, password_hash=hash_password(ADMIN_PASSWORD), is_active=True)
    user.role_assignments = [UserRole(role=Role.ADMIN.value)]
    db.add(user)
    db.commit()
    logger.info("Created admin user: %s", ADMIN_EMAIL)
    logger.info("  Password: %s", ADMIN_PASSWORD)
    logger.info("  >>> CHANGE THIS PASSWORD AFTER FIRST LOGIN <<<")
    return user


def seed_demo_data(db) -> int:
    """Insert the demo resources, projects and allocations into an empty database."""
    if db.query(Resource).count():
        logger.info("Resources already present, skipping demo data.")
        return 0

    # demo ids are only references inside the dataset; the database assigns its own
    resource_ids, project_ids = {}, {}
    for row in DEMO_RESOURCES:
        values = {k: v for k, v in row.items() if k != "id"}
        resource = Resource(**values)
        db.add(resource)
        db.flush()
        resource_ids[row["id"]] = resource.id

    for row in DEMO_PROJECTS:
        values = {k: v for k, v in row.items() if k != "id"}
        for lead in ("director_id", "change_lead_id", "business_lead_id"):
            if values.get(lead) is not None:
                values[lead] = resource_ids[values[lead]]
        project = Project(**values)
        db.add(project)
        db.flush()
        project_ids[row["id"]] = project.id

    for row in DEMO_ALLOCATIONS:
        values = {k: v for k, v in row.items() if k != "id"}
        values["resource_id"] = resource_ids[values["resource_id"]]
        values["project_id"] = project_ids[values["project_id"]]
        db.add(ResourceAllocation(**values))

    db.commit()
    logger.info(
        "Seeded %d resources, %d projects, %d allocations",
        len(DEMO_RESOURCES), len(DEMO_PROJECTS), len(DEMO_ALLOCATIONS),
    )
    return len(DEMO_RESOURCES)


def run_seed(with_demo: bool = False):
    db = SessionLocal()
    try:
        seed_admin(db)
        if with_demo:
            seed_demo_data(db)
        logger.info("Seed complete.")
    except Exception:
        logger.exception("Seed failed")
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    run_seed(with_demo="--demo" in sys.argv[1:])
