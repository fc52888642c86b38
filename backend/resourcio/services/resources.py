import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from resourcio.models.allocation import ResourceAllocation
from resourcio.models.project import Project
from resourcio.models.resource import Resource
from resourcio.models.time_entry import TimeEntry, WeeklySubmission
from resourcio.models.user import User

logger = logging.getLogger(__name__)


@dataclass
class ResourceRelationships:
    active_allocations: int = 0
    time_entries: int = 0
    projects_as_director: int = 0
    projects_as_change_lead: int = 0
    projects_as_business_lead: int = 0
    weekly_submissions: int = 0
    user_accounts: int = 0
    can_delete: bool = True  # soft delete is always allowed
    warnings: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)


def _led_projects(db: Session, column, resource_id: int) -> int:
    return db.query(Project).filter(column == resource_id, Project.status != "rejected").count()


def check_relationships(db: Session, resource_id: int) -> ResourceRelationships:
    """What a soft delete of this resource leaves behind."""
    rel = ResourceRelationships(
        active_allocations=db.query(ResourceAllocation)
        .filter(ResourceAllocation.resource_id == resource_id, ResourceAllocation.status == "active")
        .count(),
        time_entries=db.query(TimeEntry).filter(TimeEntry.resource_id == resource_id).count(),
        projects_as_director=_led_projects(db, Project.director_id, resource_id),
        projects_as_change_lead=_led_projects(db, Project.change_lead_id, resource_id),
        projects_as_business_lead=_led_projects(db, Project.business_lead_id, resource_id),
        weekly_submissions=db.query(WeeklySubmission).filter(WeeklySubmission.resource_id == resource_id).count(),
        user_accounts=db.query(User).filter(User.resource_id == resource_id, User.is_active.is_(True)).count(),
    )

    if rel.active_allocations:
        rel.warnings.append(f"{rel.active_allocations} active project allocation(s) will be preserved")
        rel.suggestions.append("Consider completing or reassigning active allocations before deletion")

    led = rel.projects_as_director + rel.projects_as_change_lead + rel.projects_as_business_lead
    if led:
        rel.warnings.append(f"{led} project leadership role(s) will be preserved")
        rel.suggestions.append("Consider reassigning project leadership roles to other resources")

    if rel.user_accounts:
        rel.warnings.append(f"{rel.user_accounts} user account(s) will be deactivated")
        rel.suggestions.append("User accounts will be automatically deactivated")

    if rel.time_entries:
        rel.warnings.append(f"{rel.time_entries} time entries will be preserved for historical reporting")

    return rel


def soft_delete_resource(db: Session, resource: Resource) -> int:
    """Flag the resource deleted and deactivate linked logins. Returns the number of users deactivated.

    Does not commit.
    """
    resource.is_deleted = True
    resource.is_active = False
    resource.deleted_at = datetime.now(timezone.utc)

    users = db.query(User).filter(User.resource_id == resource.id, User.is_active.is_(True)).all()
    for user in users:
        user.is_active = False

    logger.info("Soft-deleted resource %s, deactivated %d user(s)", resource.id, len(users))
    return len(users)
