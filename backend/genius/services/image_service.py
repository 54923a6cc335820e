"""
Image generation request handling.
Images are generated by Gemini only, so the request is accepted only while
routing keeps it on the image provider.
"""
import logging
from typing import List, Optional

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from genius.ai.image_provider import ImageGenerator
from genius.ai.prompts import image_prompt
from genius.config import settings
from genius.exceptions import QuotaExhaustedError
from genius.models.generated_image import GeneratedImage
from genius.services.chat_service import ensure_affordable
from genius.services.quota_manager import QuotaManager

logger = logging.getLogger(__name__)


class ImageService:
    """Service for generated images."""

    @staticmethod
    async def generate_image(
        db: AsyncSession,
        quota_manager: QuotaManager,
        generator: ImageGenerator,
        user_id: str,
        prompt: str,
        style: str = "realistic",
    ) -> Optional[GeneratedImage]:
        """
        Generate and store an image.

        Args:
            db: Database session
            quota_manager: Per-request quota manager
            generator: Image generation client
            user_id: Authenticated user's ID
            prompt: What to draw
            style: Visual style prefix

        Returns:
            Stored GeneratedImage, or None if the model returned no image

        Raises:
            QuotaExhaustedError: Image provider quota used up
            ProviderCallError: Image API failed (no usage recorded)
        """
        image_provider = quota_manager.catalog.find_provider(generator.provider)
        model_id = image_provider.primary_model.id if image_provider else settings.default_model_id
        decision = await quota_manager.check_and_get_best_provider(user_id, model_id)
        if decision.can_proceed and decision.provider != generator.provider:
            # Routing moved off the image provider; another provider cannot draw
            raise QuotaExhaustedError(quota_manager.get_quota_status(decision.ledger))
        await ensure_affordable(db, quota_manager, user_id, decision)

        image_url = await generator.generate(image_prompt(prompt, style))
        if not image_url:
            logger.warning("Image model returned no image", extra={"event": "image_empty", "user_id": user_id})
            return None

        image = GeneratedImage(
            user_id=user_id,
            prompt=prompt,
            style=style,
            image_url=image_url,
            model=generator.model,
            cost=decision.cost,
        )
        db.add(image)
        await db.commit()
        await db.refresh(image)

        await quota_manager.increment_usage(decision.ledger, generator.provider)
        logger.info(
            f"Image generated for user {user_id}",
            extra={"event": "image_generated", "user_id": user_id, "image_id": image.id},
        )
        return image

    @staticmethod
    async def list_images(db: AsyncSession, user_id: str) -> List[GeneratedImage]:
        """User's images, newest first."""
        result = await db.execute(
            select(GeneratedImage)
            .where(GeneratedImage.user_id == user_id)
            .order_by(GeneratedImage.created_at.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def delete_image(db: AsyncSession, image_id: str, user_id: str) -> None:
        """
        Delete one of the user's images.

        Raises:
            ValueError: If image not found or doesn't belong to user
        """
        result = await db.execute(
            delete(GeneratedImage).where(
                GeneratedImage.id == image_id,
                GeneratedImage.user_id == user_id,
            )
        )
        if result.rowcount == 0:
            raise ValueError(f"Image {image_id} not found or access denied")
        await db.commit()
