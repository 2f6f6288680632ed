"""
Tests unitaires pour l'envoi S3.

Le client boto3 est remplace par un MagicMock: aucun appel reseau.
"""

from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from ministry_backup.domain.exceptions import OffsiteUploadError
from ministry_backup.infrastructure.backup.s3_uploader import S3BackupUploader
from ministry_backup.infrastructure.backup.service import BackupService


@pytest.fixture
def s3_settings(make_settings):
    return make_settings(
        backup_s3_bucket="ministry-backups",
        backup_s3_prefix="nightly/",
        s3_endpoint="https://account.r2.cloudflarestorage.com",
        s3_region="auto",
        s3_access_key_id="AKIA_TEST",
        s3_secret_access_key="secret-test",
    )


@pytest.fixture
def dump_file(make_backup_file):
    return make_backup_file("backup_2024-01-01_03-00-00.sql.gz")


class TestS3BackupUploader:
    """Tests pour S3BackupUploader."""

    def test_uploads_under_prefix(self, s3_settings, dump_file):
        """La cle est BACKUP_S3_PREFIX + nom du fichier."""
        client = MagicMock()
        uploader = S3BackupUploader(s3_settings, client=client)

        key = uploader.upload(dump_file, dump_file.name)

        assert key == "nightly/backup_2024-01-01_03-00-00.sql.gz"
        client.upload_file.assert_called_once_with(
            str(dump_file),
            "ministry-backups",
            "nightly/backup_2024-01-01_03-00-00.sql.gz",
            ExtraArgs={"ContentType": "application/gzip", "ContentEncoding": "gzip"},
        )

    def test_client_error_is_wrapped(self, s3_settings, dump_file):
        client = MagicMock()
        client.upload_file.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "Access Denied"}},
            "PutObject",
        )
        uploader = S3BackupUploader(s3_settings, client=client)

        with pytest.raises(OffsiteUploadError) as exc_info:
            uploader.upload(dump_file, dump_file.name)

        assert exc_info.value.key == "nightly/backup_2024-01-01_03-00-00.sql.gz"
        assert "AccessDenied" in exc_info.value.message

    def test_network_error_is_wrapped(self, s3_settings, dump_file):
        client = MagicMock()
        client.upload_file.side_effect = EndpointConnectionError(endpoint_url="https://r2")
        uploader = S3BackupUploader(s3_settings, client=client)

        with pytest.raises(OffsiteUploadError):
            uploader.upload(dump_file, dump_file.name)

    def test_missing_configuration(self, make_settings, dump_file):
        """Sans credentials, echec explicite sans creer de client."""
        settings = make_settings(backup_s3_bucket="ministry-backups", s3_endpoint="")
        uploader = S3BackupUploader(settings)

        with patch("ministry_backup.infrastructure.backup.s3_uploader.boto3") as boto3_mock:
            with pytest.raises(OffsiteUploadError) as exc_info:
                uploader.upload(dump_file, dump_file.name)

        boto3_mock.client.assert_not_called()
        assert "S3_ENDPOINT" in exc_info.value.message
        assert "S3_ACCESS_KEY_ID" in exc_info.value.message
        assert "BACKUP_S3_BUCKET" not in exc_info.value.message

    def test_client_uses_path_style(self, s3_settings, dump_file):
        """Le client est construit avec l'endpoint et l'adressage path-style."""
        with patch("ministry_backup.infrastructure.backup.s3_uploader.boto3") as boto3_mock:
            S3BackupUploader(s3_settings).upload(dump_file, dump_file.name)

        kwargs = boto3_mock.client.call_args.kwargs
        assert boto3_mock.client.call_args.args == ("s3",)
        assert kwargs["endpoint_url"] == "https://account.r2.cloudflarestorage.com"
        assert kwargs["region_name"] == "auto"
        assert kwargs["aws_access_key_id"] == "AKIA_TEST"
        assert kwargs["config"].s3 == {"addressing_style": "path"}

    def test_client_is_reused(self, s3_settings, dump_file):
        with patch("ministry_backup.infrastructure.backup.s3_uploader.boto3") as boto3_mock:
            uploader = S3BackupUploader(s3_settings)
            uploader.upload(dump_file, dump_file.name)
            uploader.upload(dump_file, dump_file.name)

        assert boto3_mock.client.call_count == 1

    def test_service_uses_s3_when_bucket_set(self, s3_settings):
        """BackupService construit l'uploader S3 si un bucket est defini."""
        service = BackupService(s3_settings)

        assert isinstance(service._uploader, S3BackupUploader)
