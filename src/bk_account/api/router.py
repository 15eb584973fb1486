"""bk_account REST API — all endpoints require JWT authentication."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.bk_account.application.ownership import AccountOwnershipService, get_ownership_service
from src.bk_account.application.schemas import (
    CreateAccountRequest,
    RenameAccountRequest,
    UpdateAccountStatusRequest,
)
from src.bk_account.application.service import AccountApplicationService, get_account_service
from src.bk_common.response import ApiResponse, success_response
from src.bk_gateway.auth.dependencies import (
    CurrentUser,
    ensure_account_access,
    get_current_user,
    require_admin,
)

router = APIRouter(prefix="/accounts", tags=["accounts"])

AccountServiceDep = Annotated[AccountApplicationService, Depends(get_account_service)]
OwnershipDep = Annotated[AccountOwnershipService, Depends(get_ownership_service)]


@router.post("")
async def open_account(
    body: CreateAccountRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: AccountServiceDep,
    request: Request,
) -> ApiResponse:
    data = await service.open_account(current_user.id, body.account_name, body.currency)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("")
async def list_accounts(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: AccountServiceDep,
    request: Request,
) -> ApiResponse:
    data = await service.list_accounts(current_user.id)
    resp = success_response([a.model_dump() for a in data])
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


# Registered before /{account_id} so "all" is not parsed as an id
@router.get("/all")
async def list_all_accounts(
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    service: AccountServiceDep,
    request: Request,
) -> ApiResponse:
    data = await service.list_all_accounts()
    resp = success_response([a.model_dump() for a in data])
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{account_id}")
async def get_account(
    account_id: int,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: AccountServiceDep,
    ownership: OwnershipDep,
    request: Request,
) -> ApiResponse:
    await ensure_account_access(current_user, account_id, ownership)
    data = await service.get_account(account_id)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.patch("/{account_id}")
async def rename_account(
    account_id: int,
    body: RenameAccountRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: AccountServiceDep,
    ownership: OwnershipDep,
    request: Request,
) -> ApiResponse:
    await ensure_account_access(current_user, account_id, ownership)
    data = await service.rename_account(account_id, body.account_name)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.delete("/{account_id}")
async def close_account(
    account_id: int,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: AccountServiceDep,
    ownership: OwnershipDep,
    request: Request,
) -> ApiResponse:
    await ensure_account_access(current_user, account_id, ownership)
    data = await service.close_account(account_id)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.patch("/{account_id}/status")
async def set_account_status(
    account_id: int,
    body: UpdateAccountStatusRequest,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    service: AccountServiceDep,
    request: Request,
) -> ApiResponse:
    data = await service.set_status(account_id, body.status)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
