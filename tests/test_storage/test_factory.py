import pytest
from unittest.mock import patch

from newsroom.config import Settings
from newsroom.core.exceptions import StorageConfigurationError
from newsroom.storage import create_storage_service
from newsroom.storage.supabase import SupabaseStorageService


def make_settings(**overrides):
    return Settings(_env_file=None, **overrides)


def test_supabase_backend():
    service = create_storage_service(make_settings(
        supabase_url="https://proj.supabase.co",
        supabase_service_role_key="service-key",
        storage_list_page_size=25,
    ))

    assert isinstance(service, SupabaseStorageService)
    assert service.page_size == 25


def test_missing_supabase_credentials_fail_fast(monkeypatch):
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_SERVICE_ROLE_KEY", raising=False)

    with pytest.raises(StorageConfigurationError) as exc_info:
        create_storage_service(make_settings(supabase_url="https://proj.supabase.co"))

    assert exc_info.value.details["missing"] == ["supabase_service_role_key"]
    assert exc_info.value.error_code == "STORAGE_NOT_CONFIGURED"


@patch("newsroom.storage.gcs.storage.Client")
def test_gcs_backend(mock_client):
    service = create_storage_service(make_settings(storage_backend="GCS", gcp_project_id="newsroom-prod"))

    mock_client.assert_called_once_with(project="newsroom-prod")
    assert service.client is mock_client.return_value


def test_settings_parse_comma_separated_buckets(monkeypatch):
    monkeypatch.setenv("STORAGE_BUCKETS", "news-images, archive ,")

    settings = make_settings()

    assert settings.storage_buckets == ["news-images", "archive"]


def test_unknown_backend_rejected():
    with pytest.raises(ValueError):
        make_settings(storage_backend="s3")


@pytest.mark.parametrize("page_size", [0, -1])
def test_non_positive_list_page_size_rejected(page_size):
    with pytest.raises(ValueError):
        make_settings(storage_list_page_size=page_size)
