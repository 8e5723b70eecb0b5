"""
Product model

A listing owned by a seller, with one video held in the media store.
"""
from sqlalchemy import Column, String, Text, Boolean, Integer, Numeric, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship

from flockr.core.database import Base
from flockr.core.utils import utcnow, new_id


class Product(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=new_id)

    # Set once at creation
    owner_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    category = Column(String(100), nullable=True, index=True)
    is_available = Column(Boolean, nullable=False, default=True)

    # Media store reference; media_handle is what deletion needs
    video_url = Column(String, nullable=False)
    media_handle = Column(String, nullable=False)

    views = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    owner = relationship("User", back_populates="products")

    __table_args__ = (
        Index("ix_products_category_created", "category", "created_at"),
    )

    def __repr__(self):
        return f"<Product(id={self.id}, title='{self.title}', owner_id={self.owner_id})>"

    def is_owned_by(self, user_id: str) -> bool:
        return self.owner_id == str(user_id)
