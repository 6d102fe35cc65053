from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from portal_auth.api.deps import (
    get_current_customer,
    get_list_sessions_use_case,
    get_revoke_all_sessions_use_case,
    get_revoke_other_sessions_use_case,
    get_revoke_session_use_case,
)
from portal_auth.api.schemas.auth import RevokedCountResponse, SessionResponse
from portal_auth.application.dto.session import RevokeSessionInput, SessionOutput
from portal_auth.application.use_cases.list_sessions import ListSessionsUseCase
from portal_auth.application.use_cases.revoke_all_sessions import RevokeAllSessionsUseCase
from portal_auth.application.use_cases.revoke_other_sessions import RevokeOtherSessionsUseCase
from portal_auth.application.use_cases.revoke_session import RevokeSessionUseCase
from portal_auth.domain.entities.principal import CredentialPayload
from portal_auth.domain.exceptions import ForbiddenError, SessionNotFoundError


router = APIRouter()


def _session_response(output: SessionOutput) -> SessionResponse:
    return SessionResponse(
        id=output.id,
        device_id=output.device_id,
        device_name=output.device_name,
        user_agent=output.user_agent,
        ip_address=output.ip_address,
        country=output.country,
        province=output.province,
        district=output.district,
        state=output.state,
        refresh_expires_at=output.refresh_expires_at,
        last_activity_at=output.last_activity_at,
        revoked_at=output.revoked_at,
        revoked_reason=output.revoked_reason,
        created_at=output.created_at,
        is_current=output.is_current,
    )


@router.get("/v1/auth/customer/sessions", response_model=list[SessionResponse])
def list_sessions(
    current_customer: CredentialPayload = Depends(get_current_customer),
    use_case: ListSessionsUseCase = Depends(get_list_sessions_use_case),
):
    outputs = use_case.execute(
        customer_id=current_customer.subject_id,
        current_session_id=current_customer.session_id,
    )
    return [_session_response(output) for output in outputs]


@router.post("/v1/auth/customer/sessions/revoke-others", response_model=RevokedCountResponse)
def revoke_other_sessions(
    current_customer: CredentialPayload = Depends(get_current_customer),
    use_case: RevokeOtherSessionsUseCase = Depends(get_revoke_other_sessions_use_case),
):
    output = use_case.execute(
        customer_id=current_customer.subject_id,
        current_session_id=current_customer.session_id,
    )
    return RevokedCountResponse(revoked=output.revoked)


@router.post("/v1/auth/customer/sessions/revoke-all", response_model=RevokedCountResponse)
def revoke_all_sessions(
    current_customer: CredentialPayload = Depends(get_current_customer),
    use_case: RevokeAllSessionsUseCase = Depends(get_revoke_all_sessions_use_case),
):
    output = use_case.execute(customer_id=current_customer.subject_id)
    return RevokedCountResponse(revoked=output.revoked)


@router.post("/v1/auth/customer/sessions/{session_id}/revoke", response_model=SessionResponse)
def revoke_session(
    session_id: str,
    current_customer: CredentialPayload = Depends(get_current_customer),
    use_case: RevokeSessionUseCase = Depends(get_revoke_session_use_case),
):
    try:
        output = use_case.execute(
            RevokeSessionInput(
                customer_id=current_customer.subject_id,
                session_id=session_id,
            )
        )
    except SessionNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ForbiddenError as exc:
        raise HTTPException(status_code=403, detail=str(exc)) from exc

    return _session_response(output)
