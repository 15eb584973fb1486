"""bk_ledger REST API — money movement and transaction history, JWT required.

Commands require the caller to own `account_id` (or be ADMIN). Reads are
scoped to the caller's accounts; `/transactions/all` is ADMIN only.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from src.bk_account.application.ownership import AccountOwnershipService, get_ownership_service
from src.bk_common.response import ApiResponse, success_response
from src.bk_gateway.auth.dependencies import (
    CurrentUser,
    ensure_account_access,
    get_current_user,
    require_admin,
)
from src.bk_ledger.application.schemas import DepositRequest, TransferRequest, WithdrawalRequest
from src.bk_ledger.application.service import (
    TransactionApplicationService,
    get_transaction_service,
)

router = APIRouter(prefix="/transactions", tags=["transactions"])

TransactionServiceDep = Annotated[
    TransactionApplicationService, Depends(get_transaction_service)
]
OwnershipDep = Annotated[AccountOwnershipService, Depends(get_ownership_service)]


@router.post("/deposit")
async def deposit(
    body: DepositRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: TransactionServiceDep,
    ownership: OwnershipDep,
    request: Request,
) -> ApiResponse:
    await ensure_account_access(current_user, body.account_id, ownership)
    data = await service.deposit(body.account_id, body.amount, body.description)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/withdrawal")
async def withdraw(
    body: WithdrawalRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: TransactionServiceDep,
    ownership: OwnershipDep,
    request: Request,
) -> ApiResponse:
    await ensure_account_access(current_user, body.account_id, ownership)
    data = await service.withdraw(body.account_id, body.amount, body.description)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/transfer")
async def transfer(
    body: TransferRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: TransactionServiceDep,
    ownership: OwnershipDep,
    request: Request,
) -> ApiResponse:
    # Only the source must be owned; the recipient may belong to anyone
    await ensure_account_access(current_user, body.account_id, ownership)
    data = await service.transfer(
        body.account_id, body.to_account_id, body.amount, body.description
    )
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("")
async def list_my_transactions(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: TransactionServiceDep,
    request: Request,
    account_id: int | None = Query(None, alias="accountId", description="Narrow to one owned account"),
) -> ApiResponse:
    data = await service.list_for_user(current_user.id, account_id)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/all")
async def list_all_transactions(
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    service: TransactionServiceDep,
    request: Request,
    account_id: int | None = Query(None, alias="accountId", description="Narrow to one account"),
) -> ApiResponse:
    data = await service.list_all(account_id)
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{transaction_id}")
async def get_transaction(
    transaction_id: int,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: TransactionServiceDep,
    request: Request,
) -> ApiResponse:
    data = await service.get_transaction(
        transaction_id, None if current_user.is_admin else current_user.id
    )
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
