"""
GeneratedImage model for images produced by the image endpoint.
"""
from sqlalchemy import Column, String, Numeric, Text, DateTime, ForeignKey

from genius.models.base import Base, generate_uuid, utcnow


class GeneratedImage(Base):
    """Image generated for a user; image_url holds a data: URL."""

    __tablename__ = "generated_images"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    prompt = Column(Text, nullable=False)
    style = Column(String(50), nullable=True)
    image_url = Column(Text, nullable=False)
    model = Column(String(100), nullable=False)
    cost = Column(Numeric(10, 6), nullable=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)

    def __repr__(self):
        return f"<GeneratedImage(id={self.id}, model={self.model})>"
