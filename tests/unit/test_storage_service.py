"""
Unit tests for the S3 image store, using botocore's Stubber instead of a live bucket.
"""

from io import BytesIO

import boto3
import pytest
from botocore.exceptions import ClientError
from botocore.stub import ANY, Stubber
from werkzeug.datastructures import FileStorage

from shop.services.storage_service import StorageService, resolve_image_url

PNG_BYTES = b'\x89PNG\r\n\x1a\n' + b'\x00' * 64
PLACEHOLDER = 'https://via.placeholder.com/150?text=No+Image'


def make_file(data=PNG_BYTES, filename='dress.png', content_type='image/png'):
    return FileStorage(stream=BytesIO(data), filename=filename, content_type=content_type)


@pytest.fixture
def s3_client():
    return boto3.client(
        's3',
        endpoint_url='http://minio:9000',
        aws_access_key_id='test',
        aws_secret_access_key='test',
        region_name='us-east-1'
    )


@pytest.fixture
def storage(s3_client):
    return StorageService(
        endpoint='http://minio:9000',
        access_key='test',
        secret_key='test',
        bucket='uploads',
        region='us-east-1',
        public_url='http://localhost:9000/',
        folder='shop',
        max_upload_size=1024,
        allowed_mime_types={'image/png', 'image/jpeg'},
        client=s3_client
    )


class TestUploadImage:
    """Tests for StorageService.upload_image."""

    def test_upload_returns_public_url(self, storage, s3_client):
        with Stubber(s3_client) as stubber:
            stubber.add_response('head_bucket', {}, {'Bucket': 'uploads'})
            stubber.add_response('put_object', {}, {
                'Bucket': 'uploads',
                'Key': ANY,
                'Body': PNG_BYTES,
                'ContentType': 'image/png',
                'ACL': 'public-read'
            })

            url = storage.upload_image(make_file())

            stubber.assert_no_pending_responses()

        assert url.startswith('http://localhost:9000/uploads/shop/')
        assert url.endswith('.png')

    def test_bucket_is_checked_once(self, storage, s3_client):
        with Stubber(s3_client) as stubber:
            stubber.add_response('head_bucket', {}, {'Bucket': 'uploads'})
            stubber.add_response('put_object', {}, {'Bucket': 'uploads', 'Key': ANY, 'Body': ANY,
                                                    'ContentType': 'image/png', 'ACL': 'public-read'})
            stubber.add_response('put_object', {}, {'Bucket': 'uploads', 'Key': ANY, 'Body': ANY,
                                                    'ContentType': 'image/png', 'ACL': 'public-read'})

            first = storage.upload_image(make_file())
            second = storage.upload_image(make_file())

            stubber.assert_no_pending_responses()

        assert first != second

    def test_missing_bucket_is_created(self, storage, s3_client):
        with Stubber(s3_client) as stubber:
            stubber.add_client_error('head_bucket', service_error_code='404', http_status_code=404)
            stubber.add_response('create_bucket', {}, {'Bucket': 'uploads'})
            stubber.add_response('put_bucket_policy', {}, {'Bucket': 'uploads', 'Policy': ANY})
            stubber.add_response('put_object', {}, {'Bucket': 'uploads', 'Key': ANY, 'Body': ANY,
                                                    'ContentType': 'image/png', 'ACL': 'public-read'})

            storage.upload_image(make_file())

            stubber.assert_no_pending_responses()

    def test_upload_error_is_raised(self, storage, s3_client):
        with Stubber(s3_client) as stubber:
            stubber.add_response('head_bucket', {}, {'Bucket': 'uploads'})
            stubber.add_client_error('put_object', service_error_code='AccessDenied', http_status_code=403)

            with pytest.raises(ClientError):
                storage.upload_image(make_file())

    def test_file_too_large(self, storage):
        with pytest.raises(ValueError, match='too large'):
            storage.upload_image(make_file(data=b'x' * 2048))

    def test_file_type_not_allowed(self, storage):
        with pytest.raises(ValueError, match='not allowed'):
            storage.upload_image(make_file(filename='notes.txt', content_type='text/plain'))

    def test_empty_file(self, storage):
        with pytest.raises(ValueError, match='empty'):
            storage.upload_image(make_file(data=b''))


class TestResolveImageUrl:
    """Upload failures fall back to the placeholder URL."""

    def test_no_file_uses_placeholder(self, storage):
        assert resolve_image_url(storage, None, PLACEHOLDER) == PLACEHOLDER

    def test_empty_filename_uses_placeholder(self, storage):
        empty = FileStorage(stream=BytesIO(b''), filename='', content_type='application/octet-stream')
        assert resolve_image_url(storage, empty, PLACEHOLDER) == PLACEHOLDER

    def test_no_store_uses_placeholder(self):
        assert resolve_image_url(None, make_file(), PLACEHOLDER) == PLACEHOLDER

    def test_upload_failure_uses_placeholder(self, storage, s3_client, caplog):
        with Stubber(s3_client) as stubber:
            stubber.add_response('head_bucket', {}, {'Bucket': 'uploads'})
            stubber.add_client_error('put_object', service_error_code='AccessDenied', http_status_code=403)

            with caplog.at_level('WARNING', logger='shop.services.storage_service'):
                url = resolve_image_url(storage, make_file(), PLACEHOLDER)

        assert url == PLACEHOLDER
        assert 'Image upload failed' in caplog.text

    def test_rejected_file_uses_placeholder(self, storage):
        big = make_file(data=b'x' * 4096)
        assert resolve_image_url(storage, big, PLACEHOLDER) == PLACEHOLDER

    def test_successful_upload_url(self, storage, s3_client):
        with Stubber(s3_client) as stubber:
            stubber.add_response('head_bucket', {}, {'Bucket': 'uploads'})
            stubber.add_response('put_object', {}, {'Bucket': 'uploads', 'Key': ANY, 'Body': ANY,
                                                    'ContentType': 'image/png', 'ACL': 'public-read'})
            url = resolve_image_url(storage, make_file(), PLACEHOLDER)

        assert url.startswith('http://localhost:9000/uploads/shop/')


def test_from_config():
    from config import Config

    config = {key: getattr(Config, key) for key in dir(Config) if key.isupper()}
    storage = StorageService.from_config(config)

    assert storage.bucket == Config.S3_BUCKET
    assert storage.folder == Config.S3_FOLDER
    assert storage.get_public_url('shop/a.png') == f"{Config.S3_PUBLIC_URL.rstrip('/')}/{Config.S3_BUCKET}/shop/a.png"
