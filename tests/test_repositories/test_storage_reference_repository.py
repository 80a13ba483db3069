from newsroom.models import Article, ArticleImage, Source
from newsroom.repositories.storage_reference_repository import StorageReferenceRepository


def test_lists_every_storage_column(test_db):
    source = Source(name="Wire", logo_url=None)
    article = Article(title="One", slug="one", thumbnail_url="https://cdn.example.com/one.jpg", source=source)
    article.images = [
        ArticleImage(url="https://example.com/1.jpg", position=0),
        ArticleImage(url="https://example.com/2.jpg", position=1),
    ]
    test_db.add_all([
        source,
        article,
        Article(title="Two", slug="two", thumbnail_url=None),
        Source(name="Gazette", logo_url="https://example.com/gazette.png"),
    ])
    test_db.commit()

    repo = StorageReferenceRepository(test_db)

    assert sorted(repo.list_thumbnail_urls(), key=lambda u: u or "") == [None, "https://cdn.example.com/one.jpg"]
    assert sorted(repo.list_article_image_urls()) == ["https://example.com/1.jpg", "https://example.com/2.jpg"]
    assert sorted(repo.list_source_logo_urls(), key=lambda u: u or "") == [None, "https://example.com/gazette.png"]


def test_empty_tables(test_db):
    repo = StorageReferenceRepository(test_db)

    assert repo.list_thumbnail_urls() == []
    assert repo.list_article_image_urls() == []
    assert repo.list_source_logo_urls() == []


def test_images_removed_with_article(test_db):
    article = Article(title="Gone", slug="gone", images=[ArticleImage(url="https://example.com/g.jpg")])
    test_db.add(article)
    test_db.commit()

    test_db.delete(article)
    test_db.commit()

    assert StorageReferenceRepository(test_db).list_article_image_urls() == []
