"""
Gallery routes.
Public listing plus authorized create, update and delete of gallery items.
Writes accept the shared admin password or a bearer token.
"""
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, status
from typing import List, Optional
import logging

from affiliate_gallery.repositories.factory import get_gallery_repository
from affiliate_gallery.repositories.interfaces import GalleryRepository
from affiliate_gallery.schemas import (
    GalleryItemPayload,
    GalleryItemResponse,
    ItemMutationResponse,
    MessageResponse,
)
from affiliate_gallery.services.notification_service import NotificationService, get_notification_service
from affiliate_gallery.utils.authorizer import Principal, require_editor
from affiliate_gallery.utils.rate_limit import RATE_LIMITS, limiter

logger = logging.getLogger(__name__)

router = APIRouter()

MISSING_FIELDS_ERROR = "Name, Image URL, and Affiliate URL are required."


def _require_fields(payload: GalleryItemPayload) -> None:
    if payload.missing_required():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": MISSING_FIELDS_ERROR}
        )


@router.get("/gallery", response_model=List[GalleryItemResponse])
async def get_gallery_items(
    sort: Optional[str] = None,
    order: Optional[str] = None,
    repository: GalleryRepository = Depends(get_gallery_repository)
):
    """
    Get every gallery item.

    Unknown sort/order values fall back to createdAt descending; the client
    does its own filtering, sorting and pagination over the full list.

    Args:
        sort: "createdAt" or "name"
        order: "asc" or "desc"
        repository: Gallery storage (injected by FastAPI dependency)

    Returns:
        List[GalleryItemResponse]: All gallery items

    Raises:
        HTTPException: 500 if the store query fails
    """
    try:
        return await repository.list(sort, order)
    except Exception as e:
        logger.error(f"Failed to retrieve gallery items: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Failed to retrieve gallery items."}
        )


@router.post("/upload", response_model=ItemMutationResponse, status_code=status.HTTP_201_CREATED)
@router.post("/gallery", response_model=ItemMutationResponse, status_code=status.HTTP_201_CREATED, include_in_schema=False)
@limiter.limit(RATE_LIMITS["upload"])
async def upload_gallery_item(
    request: Request,
    payload: GalleryItemPayload,
    background_tasks: BackgroundTasks,
    principal: Principal = Depends(require_editor),
    repository: GalleryRepository = Depends(get_gallery_repository),
    notifier: NotificationService = Depends(get_notification_service)
):
    """
    Add a new gallery item.
    Requires the admin password or a bearer token.

    Announces the new item on the configured channels after the response is sent.

    Returns:
        ItemMutationResponse: Success message and the created item

    Raises:
        HTTPException: 400 if required fields are missing, 401/403 if unauthorized,
            500 if the insert fails
    """
    _require_fields(payload)

    try:
        item = await repository.insert(payload.to_fields(), user_id=principal.user_id)
    except Exception as e:
        logger.error(f"Database insertion failed: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Database insertion failed."}
        )

    logger.info(f"Gallery item {item.id} added by {principal.username or principal.user_id}")
    background_tasks.add_task(notifier.announce_new_item, item)

    return ItemMutationResponse(message="Item added successfully!", item=item)


@router.put("/gallery/{item_id}", response_model=ItemMutationResponse)
async def update_gallery_item(
    item_id: int,
    payload: GalleryItemPayload,
    principal: Principal = Depends(require_editor),
    repository: GalleryRepository = Depends(get_gallery_repository)
):
    """
    Update an existing gallery item.
    Requires the admin password or a bearer token.

    Args:
        item_id: Item ID to update
        payload: New values; name, imageUrl and affiliateUrl are required

    Returns:
        ItemMutationResponse: Success message and the updated item

    Raises:
        HTTPException: 400 if required fields are missing, 401/403 if unauthorized,
            404 if the item does not exist, 500 if the update fails
    """
    _require_fields(payload)

    try:
        changed = await repository.update(item_id, payload.to_fields())
        if changed == 0:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"error": "Item not found."}
            )

        item = await repository.get(item_id)
        logger.info(f"Successfully updated gallery item: ID {item_id}")

        return ItemMutationResponse(message="Item updated successfully!", item=item)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Database update failed: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Database update failed."}
        )


@router.delete("/gallery/{item_id}", response_model=MessageResponse)
@limiter.limit(RATE_LIMITS["delete"])
async def delete_gallery_item(
    request: Request,
    item_id: int,
    principal: Principal = Depends(require_editor),
    repository: GalleryRepository = Depends(get_gallery_repository)
):
    """
    Delete a gallery item.
    Requires the admin password or a bearer token.

    Raises:
        HTTPException: 401/403 if unauthorized, 404 if the item does not exist,
            500 if the deletion fails
    """
    try:
        changed = await repository.delete(item_id)
        if changed == 0:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"error": "Item not found."}
            )

        logger.info(f"Successfully deleted gallery item: ID {item_id}")
        return MessageResponse(message="Item deleted successfully!")

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Database deletion failed: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Database deletion failed."}
        )
