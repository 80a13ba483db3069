from typing import List, Optional

from sqlalchemy.orm import Session

from ..models.article import Article, ArticleImage
from ..models.source import Source


class StorageReferenceRepository:
    """Read-only queries for every column that may point into object storage."""

    def __init__(self, session: Session):
        self.session = session

    def list_thumbnail_urls(self) -> List[Optional[str]]:
        return [row.thumbnail_url for row in self.session.query(Article.thumbnail_url).all()]

    def list_article_image_urls(self) -> List[Optional[str]]:
        return [row.url for row in self.session.query(ArticleImage.url).all()]

    def list_source_logo_urls(self) -> List[Optional[str]]:
        return [row.logo_url for row in self.session.query(Source.logo_url).all()]
