"""
Image generation endpoints.
Generation counts against the Gemini daily free quota.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from genius.ai.factory import get_image_generator
from genius.ai.image_provider import ImageGenerator
from genius.api.chat import insufficient_funds_response, quota_exhausted_response
from genius.auth.dependencies import get_current_user
from genius.database import get_db
from genius.exceptions import InsufficientFundsError, ProviderCallError, QuotaExhaustedError
from genius.models.user import User
from genius.schemas.image import ImageGenerateRequest, ImageResponse
from genius.services.image_service import ImageService
from genius.services.quota_manager import QuotaManager, get_quota_manager

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/generate", response_model=ImageResponse, status_code=status.HTTP_201_CREATED)
async def generate_image(
    request: ImageGenerateRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    quota_manager: QuotaManager = Depends(get_quota_manager),
    generator: ImageGenerator = Depends(get_image_generator),
):
    """
    Generate an image from a prompt.
    Requires valid Firebase JWT token.
    """
    user_id = current_user.id
    try:
        image = await ImageService.generate_image(
            db,
            quota_manager,
            generator,
            user_id=user_id,
            prompt=request.prompt,
            style=request.style,
        )
    except QuotaExhaustedError as e:
        return quota_exhausted_response(e)
    except InsufficientFundsError as e:
        return insufficient_funds_response(e)
    except ProviderCallError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    except Exception as e:
        await db.rollback()
        logger.error(
            f"Image generation failed: {str(e)}",
            extra={
                "event": "image_failed",
                "user_id": user_id,
                "error": str(e),
            },
            exc_info=True,
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to generate image: {str(e)}"
        )

    if image is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="No image generated"
        )
    return ImageResponse.model_validate(image)


@router.get("", response_model=List[ImageResponse])
async def list_images(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """List the user's generated images, newest first."""
    images = await ImageService.list_images(db, current_user.id)
    return [ImageResponse.model_validate(i) for i in images]


@router.delete("/{image_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_image(
    image_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Delete a generated image. Returns 404 if not found or not owned."""
    try:
        await ImageService.delete_image(db, image_id, current_user.id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
