from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from qrdine.api.dependencies import admin_restaurant_id, current_principal, engine_from
from qrdine.application.auth import Principal
from qrdine.application.dto.responses import StaffCallResponse
from qrdine.application.use_cases.staff_calls import ResolveStaffCall
from qrdine.domain.common.ids import RestaurantId, StaffCallId
from qrdine.infrastructure.db.repositories.staff_call_repo import SqlAlchemyStaffCallRepository

router = APIRouter()


@router.post("/v1/admin/staff-calls/{call_id}/resolve", response_model=StaffCallResponse)
def resolve_staff_call(
    call_id: str,
    request: Request,
    principal: Principal | None = Depends(current_principal),
    restaurant_id: RestaurantId = Depends(admin_restaurant_id),
) -> StaffCallResponse:
    use_case = ResolveStaffCall(
        staff_call_repository=SqlAlchemyStaffCallRepository(engine_from(request))
    )
    return use_case.execute(
        principal=principal,
        restaurant_id=restaurant_id,
        call_id=StaffCallId(call_id),
    )
