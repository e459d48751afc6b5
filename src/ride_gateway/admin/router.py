"""Admin router — document approval with a push notification to the user."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from ride_gateway.database.repository import UserRepository
from ride_gateway.dependencies import get_db_session, get_state, require_admin
from ride_gateway.models.user import User
from ride_gateway.services.push_service import PushDeliveryError
from ride_gateway.state import GatewayState

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


class DocumentApprovalBody(BaseModel):
    email: str
    document_type: str


class AdminResponse(BaseModel):
    success: bool
    message: str


@router.post("/approve-document", response_model=AdminResponse)
async def approve_document(
    body: DocumentApprovalBody,
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
    state: GatewayState = Depends(get_state),
):
    """Tell the document's owner, via push, that it has been approved."""
    user = await UserRepository(session).find_by_email(body.email)
    if user is None or not user.fcm_token:
        raise HTTPException(status_code=404, detail="User or FCM token not found.")

    try:
        await state.push_sender.send(
            user.fcm_token,
            title="Document Approved!",
            body=f"Your {body.document_type} has been approved. You can now log in.",
            data={"documentType": body.document_type},
        )
    except PushDeliveryError as exc:
        logger.error("Error sending approval notification to %s: %s", body.email, exc)
        raise HTTPException(status_code=500, detail="Failed to send notification.") from exc

    logger.info("Document %s approved for %s by %s", body.document_type, body.email, admin.uid)
    return AdminResponse(success=True, message="User notified successfully.")
