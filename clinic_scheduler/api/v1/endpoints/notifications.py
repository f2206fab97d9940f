"""Doctor notification record endpoints."""

from uuid import UUID

from fastapi import APIRouter, status

from clinic_scheduler.core.exceptions import NotFoundException
from clinic_scheduler.dependencies import NotificationStoreDep
from clinic_scheduler.schemas.notifications import NotificationListResponse

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get(
    "/{recipient_id}",
    response_model=NotificationListResponse,
    status_code=status.HTTP_200_OK,
    summary="List a doctor's notifications",
)
async def list_notifications(
    recipient_id: UUID,
    store: NotificationStoreDep,
) -> NotificationListResponse:
    """
    List notification records addressed to a doctor, newest first.

    Args:
        recipient_id: Doctor ID
        store: Notification record store

    Returns:
        Notification records
    """
    items = await store.list_by_recipient(recipient_id)
    return NotificationListResponse(total=len(items), items=items)


@router.delete(
    "/{notification_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Dismiss notification",
)
async def delete_notification(notification_id: UUID, store: NotificationStoreDep) -> None:
    """
    Delete a notification record once it has been handled.

    Args:
        notification_id: Notification record ID
        store: Notification record store

    Raises:
        NotFoundException: If the record does not exist
    """
    if not await store.delete(notification_id):
        raise NotFoundException("Notification not found")
