"""
Like and dislike counters.

No authentication and no server-side deduplication: the browser keeps the
per-visitor liked/disliked flags and sends one increment or decrement per
toggle. Each call is a single atomic row update.
"""
from fastapi import APIRouter, Depends, HTTPException, status
import logging

from affiliate_gallery.repositories.factory import get_gallery_repository
from affiliate_gallery.repositories.interfaces import GalleryRepository
from affiliate_gallery.schemas import CounterResponse

logger = logging.getLogger(__name__)

router = APIRouter()


async def _adjust(repository: GalleryRepository, item_id: int, counter: str, delta: int) -> CounterResponse:
    try:
        item = await repository.adjust_counter(item_id, counter, delta)
    except Exception as e:
        logger.error(f"Failed to update {counter} for item {item_id}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": f"Failed to update {counter}."}
        )

    if item is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "Item not found."}
        )

    action = "added" if delta > 0 else "removed"
    noun = counter[:-1].capitalize()
    return CounterResponse(message=f"{noun} {action}.", likes=item.likes, dislikes=item.dislikes)


@router.post("/gallery/{item_id}/like", response_model=CounterResponse)
async def like_item(item_id: int, repository: GalleryRepository = Depends(get_gallery_repository)):
    return await _adjust(repository, item_id, "likes", 1)


@router.delete("/gallery/{item_id}/like", response_model=CounterResponse)
async def unlike_item(item_id: int, repository: GalleryRepository = Depends(get_gallery_repository)):
    return await _adjust(repository, item_id, "likes", -1)


@router.post("/gallery/{item_id}/dislike", response_model=CounterResponse)
async def dislike_item(item_id: int, repository: GalleryRepository = Depends(get_gallery_repository)):
    return await _adjust(repository, item_id, "dislikes", 1)


@router.delete("/gallery/{item_id}/dislike", response_model=CounterResponse)
async def undislike_item(item_id: int, repository: GalleryRepository = Depends(get_gallery_repository)):
    return await _adjust(repository, item_id, "dislikes", -1)
