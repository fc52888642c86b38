"""Departments router: the department catalogue derived from resources."""

from fastapi import APIRouter, Depends

from resourcio.dependencies import get_repository, require_access
from resourcio.models.resource import DEFAULT_DEPARTMENT
from resourcio.schemas.resource import DepartmentResponse
from resourcio.services.rbac import Principal
from resourcio.services.repository import Repository
from resourcio.services.utilization import summarize_departments

router = APIRouter(prefix="/api/departments", tags=["Departments"])


@router.get("", response_model=list[DepartmentResponse])
def list_departments(
    repo: Repository = Depends(get_repository),
    _user: Principal = Depends(require_access("departments.read")),
):
    return [
        DepartmentResponse(name=name, resource_count=total, active_resource_count=active)
        for name, total, active in summarize_departments(repo.list_resources(), always=(DEFAULT_DEPARTMENT,))
    ]
