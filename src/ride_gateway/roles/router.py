"""Role router — users ask to become drivers or admins; admins decide."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from ride_gateway.database.repository import RoleRequestRepository, UserRepository
from ride_gateway.dependencies import get_current_uid, get_db_session, require_admin
from ride_gateway.models.role_request import STATUS_APPROVED, STATUS_REJECTED
from ride_gateway.models.user import REQUESTABLE_ROLES, User

logger = logging.getLogger(__name__)

router = APIRouter(tags=["roles"])


class RoleRequestBody(BaseModel):
    role: str


class RoleDecisionBody(BaseModel):
    user_id: str
    role: str
    approve: bool


class RoleResponse(BaseModel):
    success: bool
    message: str


def _check_role(role: str) -> None:
    if role not in REQUESTABLE_ROLES:
        logger.info("Invalid role in request: %s", role)
        raise HTTPException(status_code=400, detail="Invalid role")


@router.post("/request-role", response_model=RoleResponse)
async def request_role(
    body: RoleRequestBody,
    uid: str = Depends(get_current_uid),
    session: AsyncSession = Depends(get_db_session),
):
    """Submit (or resubmit) a role-change request for the caller."""
    _check_role(body.role)
    await RoleRequestRepository(session).submit(uid, body.role)
    logger.info("Role request submitted for user %s: %s", uid, body.role)
    return RoleResponse(success=True, message="Role request submitted")


@router.post("/approve-role", response_model=RoleResponse)
async def approve_role(
    body: RoleDecisionBody,
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Approve or reject a pending request; approval changes the user's role."""
    _check_role(body.role)

    requests = RoleRequestRepository(session)
    role_request = await requests.get(body.user_id)
    if role_request is None or role_request.requested_role != body.role:
        logger.info("Role request not found for user %s", body.user_id)
        raise HTTPException(status_code=404, detail="Role request not found")

    if not body.approve:
        await requests.set_status(role_request, STATUS_REJECTED)
        logger.info("Role request rejected for user %s: %s", body.user_id, body.role)
        return RoleResponse(success=True, message="Role request rejected")

    users = UserRepository(session)
    user = await users.get(body.user_id)
    if user is None:
        logger.info("User not found: %s", body.user_id)
        raise HTTPException(status_code=404, detail="User not found")

    await users.set_role(user, body.role)
    await requests.set_status(role_request, STATUS_APPROVED)
    logger.info("Role approved for user %s: %s (by %s)", body.user_id, body.role, admin.uid)
    return RoleResponse(success=True, message="Role approved")
