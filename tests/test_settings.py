# tests/test_settings.py

import pytest
from pydantic import ValidationError

from sportshub.core.config import Settings


def test_folder_templates_are_parsed_from_csv():
    s = Settings(MEDIA_FOLDER_NAME_TEMPLATES=" {id}, playasport-{id} ,")
    assert s.folder_name_templates == ["{id}", "playasport-{id}"]


def test_empty_templates_fall_back_to_id():
    assert Settings(MEDIA_FOLDER_NAME_TEMPLATES="").folder_name_templates == ["{id}"]


def test_store_base_url_defaults_to_bucket_host():
    s = Settings(AWS_BUCKET_NAME="media", AWS_REGION="eu-west-1", STORE_PUBLIC_BASE_URL="")
    assert s.store_base_url == "https://media.s3.eu-west-1.amazonaws.com"


def test_public_base_url_override_is_normalized():
    s = Settings(STORE_PUBLIC_BASE_URL="cdn.example.com/")
    assert s.store_base_url == "https://cdn.example.com"


def test_store_needs_bucket_and_credentials():
    assert Settings(AWS_BUCKET_NAME="media", AWS_ACCESS_KEY_ID=None).store_configured is False
    assert Settings(
        AWS_BUCKET_NAME="media", AWS_ACCESS_KEY_ID="ak", AWS_SECRET_ACCESS_KEY="sk",
    ).store_configured is True


def test_temp_segment_is_stripped():
    assert Settings(TEMP_SEGMENT="/staging/").TEMP_SEGMENT == "staging"


@pytest.mark.parametrize("size", [0, 5000])
def test_list_page_size_is_bounded(size):
    with pytest.raises(ValidationError):
        Settings(S3_LIST_PAGE_SIZE=size)


def test_async_dsn_uses_asyncpg():
    s = Settings(POSTGRES_USER="u", POSTGRES_PASSWORD="p", POSTGRES_SERVER="db", POSTGRES_DB="sh")
    assert s.ASYNC_DATABASE_URL == "postgresql+asyncpg://u:p@db:5432/sh"
