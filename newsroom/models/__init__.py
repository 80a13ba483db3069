from .article import Article, ArticleImage
from .source import Source

__all__ = ["Article", "ArticleImage", "Source"]
