"""Read-only access to the profile dataset the persona answers from."""

import logging
from typing import Any

from fastapi import APIRouter, Request, Response, status

from src.api.chat import CONTEXT_ERROR, error_response, get_profile
from src.knowledge.base import KnowledgeBaseError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=None)
async def read_profile(request: Request, metadata: bool = False) -> dict[str, Any] | Response:
    """Return the full profile dataset.

    Args:
        metadata: Return only ``{"metadata": {version, last_updated,
            entry_count}}`` instead of the entries.

    Returns:
        Dataset in its on-disk layout, or its metadata. 500 CONTEXT_ERROR
        if the dataset cannot be loaded.
    """
    try:
        profile = get_profile(request)
    except KnowledgeBaseError as e:
        logger.error(f"Profile data unavailable: {e}")
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Failed to load profile data",
            CONTEXT_ERROR,
        )

    if metadata:
        return {"metadata": profile.metadata()}
    return profile.to_document()
