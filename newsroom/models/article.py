from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.database import Base


class Article(Base):
    """
    Published news article. ``thumbnail_url`` is either a public object URL
    in one of our storage buckets or an external image URL.
    """
    __tablename__ = "articles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(500), nullable=False)
    slug = Column(String(500), nullable=False, unique=True)
    summary = Column(Text)
    content = Column(Text)

    source_id = Column(Integer, ForeignKey("sources.id", ondelete="SET NULL"))
    news_link = Column(String(1000))  # Original article on the source site

    # Image fields
    thumbnail_url = Column(String(1000))

    is_published = Column(Boolean, default=False)
    view_count = Column(Integer, default=0)

    published_at = Column(DateTime)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    source = relationship("Source", back_populates="articles")
    images = relationship(
        "ArticleImage",
        back_populates="article",
        cascade="all, delete-orphan",
        order_by="ArticleImage.position",
    )

    def __repr__(self):
        return f"<Article(id={self.id}, slug='{self.slug}')>"


class ArticleImage(Base):
    __tablename__ = "article_images"

    id = Column(Integer, primary_key=True, autoincrement=True)
    article_id = Column(Integer, ForeignKey("articles.id", ondelete="CASCADE"), nullable=False, index=True)
    url = Column(String(1000), nullable=False)
    caption = Column(String(500))
    position = Column(Integer, default=0)

    created_at = Column(DateTime, default=func.now())

    article = relationship("Article", back_populates="images")
