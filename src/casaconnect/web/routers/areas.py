from typing import Any, Literal

from fastapi import APIRouter
from pydantic import BaseModel, Field

from casaconnect.core.modules.user.models import UserView
from casaconnect.web.deps import CurrentUserDep
from casaconnect.web.openapi import ErrorResponse

router = APIRouter(tags=["areas"])

AREA_RESPONSES: dict[int | str, dict[str, Any]] = {
    401: {"model": ErrorResponse, "description": "Not authenticated"},
    403: {"model": ErrorResponse, "description": "Role not allowed in this area"},
}


class AreaDashboard(BaseModel):
    """Landing data for a role area."""

    area: Literal["manager", "tenant"] = Field(..., description="Role area")
    user: UserView = Field(..., description="User bound to the session")


@router.get(
    "/manager/dashboard",
    summary="Manager dashboard",
    description="Entry point of the manager area. Open to managers and supervisors.",
    operation_id="getManagerDashboard",
    responses=AREA_RESPONSES,
)
async def manager_dashboard(user: CurrentUserDep) -> AreaDashboard:
    return AreaDashboard(area="manager", user=UserView.from_domain(user))


@router.get(
    "/tenant/dashboard",
    summary="Tenant dashboard",
    description="Entry point of the tenant area. Open to tenants only.",
    operation_id="getTenantDashboard",
    responses=AREA_RESPONSES,
)
async def tenant_dashboard(user: CurrentUserDep) -> AreaDashboard:
    return AreaDashboard(area="tenant", user=UserView.from_domain(user))
