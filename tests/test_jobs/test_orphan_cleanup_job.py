import json

import pytest
from unittest.mock import AsyncMock, patch

from newsroom.jobs import orphan_cleanup as job


@pytest.fixture
def patched_job(seeded_db, fake_storage):
    with patch.object(job, "SessionLocal", return_value=seeded_db), \
            patch.object(job, "create_storage_service", return_value=fake_storage):
        yield fake_storage


def test_parser_defaults():
    args = job.build_parser().parse_args([])

    assert args.apply is False
    assert args.buckets is None


def test_parser_repeated_buckets():
    args = job.build_parser().parse_args(["--apply", "--bucket", "news-images", "--bucket", "source-logos"])

    assert args.apply is True
    assert args.buckets == ["news-images", "source-logos"]


def test_dry_run_prints_result(patched_job, capsys):
    exit_code = job.main([])

    assert exit_code == 0
    assert json.loads(capsys.readouterr().out) == {
        "deleted": ["news-images:uploads/orphan.jpg"],
        "errors": [],
        "dryRun": True,
    }
    assert patched_job.delete_calls == []


def test_apply_deletes(patched_job, capsys):
    exit_code = job.main(["--apply", "--bucket", "news-images"])

    assert exit_code == 0
    assert json.loads(capsys.readouterr().out)["dryRun"] is False
    assert patched_job.delete_calls == [("news-images", "uploads/orphan.jpg")]


def test_errors_set_exit_code(patched_job, capsys):
    patched_job.failing_buckets = {"source-logos"}

    exit_code = job.main([])

    assert exit_code == 1
    assert json.loads(capsys.readouterr().out)["errors"][0]["path"] == "source-logos/"


def test_storage_closed_when_session_fails(fake_storage):
    fake_storage.aclose = AsyncMock()

    with patch.object(job, "SessionLocal", side_effect=RuntimeError("database unavailable")), \
            patch.object(job, "create_storage_service", return_value=fake_storage):
        with pytest.raises(RuntimeError, match="database unavailable"):
            job.main([])

    fake_storage.aclose.assert_awaited_once()
