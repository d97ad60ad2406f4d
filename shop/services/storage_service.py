"""
Object Storage Service for S3-compatible storage (MinIO, AWS S3, DigitalOcean Spaces).

Product images are uploaded here and referenced by their public URL.

Architecture:
- Uses boto3 (AWS SDK for Python)
- Compatible with MinIO (local), AWS S3, DigitalOcean Spaces
- Objects are uploaded public-read under a configurable folder prefix
- Bucket existence is checked lazily on the first upload
"""
import json
import logging
import mimetypes
import uuid
from typing import Optional

import boto3
from botocore.client import Config as BotoConfig
from botocore.exceptions import ClientError
from werkzeug.datastructures import FileStorage

logger = logging.getLogger(__name__)


class StorageService:
    """
    S3-compatible object storage service.

    Usage:
        storage = StorageService.from_config(app.config)
        url = storage.upload_image(request.files['image'])
    """

    def __init__(
        self,
        endpoint: str,
        access_key: str,
        secret_key: str,
        bucket: str,
        region: str,
        public_url: str,
        folder: str = 'shop',
        max_upload_size: int = 2 * 1024 * 1024,
        allowed_mime_types: Optional[set] = None,
        client=None
    ):
        self.endpoint = endpoint
        self.bucket = bucket
        self.public_url = public_url.rstrip('/')
        self.folder = folder.strip('/')
        self.max_upload_size = max_upload_size
        self.allowed_mime_types = allowed_mime_types or set()
        self._bucket_checked = False

        # Initialize boto3 S3 client
        self.client = client or boto3.client(
            's3',
            endpoint_url=endpoint,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            region_name=region,
            config=BotoConfig(signature_version='s3v4')
        )

    @classmethod
    def from_config(cls, config) -> 'StorageService':
        """Build the service from a Flask config mapping."""
        return cls(
            endpoint=config['S3_ENDPOINT'],
            access_key=config['S3_ACCESS_KEY'],
            secret_key=config['S3_SECRET_KEY'],
            bucket=config['S3_BUCKET'],
            region=config['S3_REGION'],
            public_url=config['S3_PUBLIC_URL'],
            folder=config.get('S3_FOLDER', 'shop'),
            max_upload_size=config.get('MAX_UPLOAD_SIZE', 2 * 1024 * 1024),
            allowed_mime_types=config.get('ALLOWED_MIME_TYPES'),
        )

    def _ensure_bucket_exists(self):
        """Create bucket if it doesn't exist."""
        if self._bucket_checked:
            return
        try:
            self.client.head_bucket(Bucket=self.bucket)
            logger.info(f"[STORAGE] Bucket '{self.bucket}' exists")
        except ClientError as e:
            error_code = e.response.get('Error', {}).get('Code')
            if error_code not in ('404', 'NoSuchBucket'):
                logger.error(f"[STORAGE] ✗ Failed to check bucket: {e}")
                raise

            self.client.create_bucket(Bucket=self.bucket)
            logger.info(f"[STORAGE] ✓ Bucket '{self.bucket}' created")

            # Product images are served straight from the bucket
            policy = {
                "Version": "2012-10-17",
                "Statement": [
                    {
                        "Effect": "Allow",
                        "Principal": {"AWS": "*"},
                        "Action": "s3:GetObject",
                        "Resource": f"arn:aws:s3:::{self.bucket}/*"
                    }
                ]
            }
            self.client.put_bucket_policy(
                Bucket=self.bucket,
                Policy=json.dumps(policy)
            )
            logger.info(f"[STORAGE] ✓ Bucket '{self.bucket}' policy set to public-read")
        self._bucket_checked = True

    def upload_image(self, file: FileStorage) -> str:
        """
        Upload an image to S3-compatible storage.

        Args:
            file: Werkzeug FileStorage object from request.files

        Returns:
            Public URL of uploaded file

        Raises:
            ValueError: If file validation fails
            ClientError: If upload fails
        """
        self._validate_file(file)
        self._ensure_bucket_exists()

        content_type = (
            file.content_type
            or mimetypes.guess_type(file.filename)[0]
            or 'application/octet-stream'
        )
        object_name = self._object_name(file.filename, content_type)

        try:
            file.seek(0)
            logger.info(f"[STORAGE] Uploading '{object_name}' to bucket '{self.bucket}'...")
            self.client.put_object(
                Bucket=self.bucket,
                Key=object_name,
                Body=file.read(),
                ContentType=content_type,
                ACL='public-read'
            )
            url = self.get_public_url(object_name)
            logger.info(f"[STORAGE] ✓ File uploaded: {url}")
            return url
        except ClientError as e:
            logger.error(f"[STORAGE] ✗ Upload failed: {e}")
            raise

    def get_public_url(self, object_name: str) -> str:
        """
        Get public URL for an object.

        Returns:
            Public URL (e.g., 'http://localhost:9000/uploads/shop/abc.jpg')
        """
        return f"{self.public_url}/{self.bucket}/{object_name.lstrip('/')}"

    def _object_name(self, filename: str, content_type: str) -> str:
        """Random object key under the configured folder, keeping the file extension."""
        extension = ''
        if filename and '.' in filename:
            extension = '.' + filename.rsplit('.', 1)[1].lower()
        elif content_type:
            extension = mimetypes.guess_extension(content_type) or ''
        key = f"{uuid.uuid4().hex}{extension}"
        return f"{self.folder}/{key}" if self.folder else key

    def _validate_file(self, file: FileStorage):
        """
        Validate uploaded file (size, type).

        Raises:
            ValueError: If validation fails
        """
        if not file or not file.filename:
            raise ValueError("No file was provided")

        file.seek(0, 2)  # Seek to end
        file_size = file.tell()
        file.seek(0)  # Reset

        if file_size == 0:
            raise ValueError("The uploaded file is empty")

        if file_size > self.max_upload_size:
            max_mb = self.max_upload_size / (1024 * 1024)
            raise ValueError(f"File too large. Maximum {max_mb:.1f}MB")

        content_type = file.content_type
        if self.allowed_mime_types and content_type not in self.allowed_mime_types:
            allowed = ', '.join(sorted(self.allowed_mime_types))
            raise ValueError(f"File type not allowed: {content_type}. Allowed: {allowed}")

        logger.info(f"[STORAGE] ✓ File validation passed: {file.filename} ({file_size} bytes, {content_type})")


def resolve_image_url(image_store, file: Optional[FileStorage], placeholder: str) -> str:
    """
    Upload ``file`` if present and return its URL.

    Upload problems never fail the request: missing file, rejected file or
    storage errors all fall back to ``placeholder`` with a warning.
    """
    if not file or not file.filename:
        return placeholder
    if image_store is None:
        logger.warning("[STORAGE] ⚠ No image store configured, using placeholder")
        return placeholder
    try:
        return image_store.upload_image(file)
    except Exception as e:
        # Any upload failure, including transport errors from the SDK
        logger.warning(f"[STORAGE] ⚠ Image upload failed, using placeholder: {e}")
        return placeholder
