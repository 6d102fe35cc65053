from __future__ import annotations

from fastapi import APIRouter, Depends, Header, HTTPException, Request

from portal_auth.api.deps import (
    get_current_customer,
    get_current_user,
    get_login_customer_use_case,
    get_login_user_use_case,
    get_optional_customer,
    get_refresh_customer_token_use_case,
)
from portal_auth.api.schemas.auth import (
    CustomerLoginRequest,
    CustomerTokenResponse,
    PrincipalResponse,
    RefreshRequest,
    RefreshResponse,
    UserLoginRequest,
    UserTokenResponse,
    WhoAmIResponse,
)
from portal_auth.application.dto.auth import (
    DeviceContext,
    LoginCustomerInput,
    LoginUserInput,
    RefreshCustomerTokenInput,
)
from portal_auth.application.use_cases.login_customer import LoginCustomerUseCase
from portal_auth.application.use_cases.login_user import LoginUserUseCase
from portal_auth.application.use_cases.refresh_customer_token import RefreshCustomerTokenUseCase
from portal_auth.domain.entities.principal import CredentialPayload
from portal_auth.domain.exceptions import (
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    SessionExpiredError,
    SessionNotFoundError,
    SessionRevokedError,
)


router = APIRouter()


def client_ip(request: Request, x_forwarded_for: str | None) -> str | None:
    if x_forwarded_for:
        first = x_forwarded_for.split(",")[0].strip()
        if first:
            return first
    if request.client is not None:
        return request.client.host
    return None


def _principal_response(payload: CredentialPayload) -> PrincipalResponse:
    return PrincipalResponse(
        id=payload.subject_id,
        username=payload.username,
        type=payload.principal_type,
        role_id=payload.role_id,
        session_id=payload.session_id,
        issued_at=payload.issued_at,
        expires_at=payload.expires_at,
    )


@router.post("/v1/auth/login", response_model=UserTokenResponse)
def login_user(
    req: UserLoginRequest,
    use_case: LoginUserUseCase = Depends(get_login_user_use_case),
):
    try:
        output = use_case.execute(LoginUserInput(username=req.username, password=req.password))
    except InvalidCredentialsError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc

    return UserTokenResponse(
        access_token=output.access_token,
        access_expires_at=output.access_expires_at,
        user_id=output.user_id,
        username=output.username,
        role_name=output.role_name,
    )


@router.post("/v1/auth/customer/login", response_model=CustomerTokenResponse)
def login_customer(
    req: CustomerLoginRequest,
    request: Request,
    user_agent: str | None = Header(default=None),
    x_forwarded_for: str | None = Header(default=None),
    x_device_id: str | None = Header(default=None),
    x_device_name: str | None = Header(default=None),
    use_case: LoginCustomerUseCase = Depends(get_login_customer_use_case),
):
    try:
        output = use_case.execute(
            LoginCustomerInput(
                username=req.username,
                email=req.email,
                password=req.password,
            ),
            DeviceContext(
                user_agent=user_agent,
                ip=client_ip(request, x_forwarded_for),
                device_id=x_device_id or None,
                device_name=x_device_name or None,
            ),
        )
    except InvalidCredentialsError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc

    return CustomerTokenResponse(
        access_token=output.access_token,
        access_expires_at=output.access_expires_at,
        refresh_token=output.refresh_token,
        refresh_expires_at=output.refresh_expires_at,
        session_id=output.session_id,
        customer_id=output.customer_id,
        username=output.username,
        email=output.email,
        device_id=output.device_id,
        device_name=output.device_name,
        location={
            "country": output.location.country,
            "province": output.location.province,
            "district": output.location.district,
            "latitude": output.location.latitude,
            "longitude": output.location.longitude,
        },
    )


@router.post("/v1/auth/customer/refresh", response_model=RefreshResponse)
def refresh_customer_token(
    req: RefreshRequest,
    use_case: RefreshCustomerTokenUseCase = Depends(get_refresh_customer_token_use_case),
):
    try:
        output = use_case.execute(
            RefreshCustomerTokenInput(
                session_id=req.session_id,
                refresh_token=req.refresh_token,
            )
        )
    except (
        SessionNotFoundError,
        SessionRevokedError,
        SessionExpiredError,
        InvalidRefreshTokenError,
        InvalidCredentialsError,
    ) as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc

    return RefreshResponse(
        access_token=output.access_token,
        access_expires_at=output.access_expires_at,
        refresh_token=output.refresh_token,
        refresh_expires_at=output.refresh_expires_at,
        session_id=output.session_id,
    )


@router.get("/v1/auth/user/me", response_model=PrincipalResponse)
def get_user_me(current_user: CredentialPayload = Depends(get_current_user)):
    return _principal_response(current_user)


@router.get("/v1/auth/customer/me", response_model=PrincipalResponse)
def get_customer_me(current_customer: CredentialPayload = Depends(get_current_customer)):
    return _principal_response(current_customer)


@router.get("/v1/auth/customer/whoami", response_model=WhoAmIResponse)
def customer_whoami(current_customer: CredentialPayload | None = Depends(get_optional_customer)):
    if current_customer is None:
        return WhoAmIResponse(authenticated=False)
    return WhoAmIResponse(authenticated=True, principal=_principal_response(current_customer))
