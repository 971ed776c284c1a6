"""
Storage Service - stores generated PDFs and uploaded attachments.

Files go to an S3 compatible bucket when STORAGE_BUCKET is configured and
are served back through presigned URLs. Without a bucket they are written
under OUTPUT_FOLDER and served by the files blueprint.
"""

import logging
import mimetypes
import os
from typing import Dict, Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when a file cannot be stored."""


class StorageService:
    """Upload files to object storage or the local output folder."""

    def __init__(self, bucket: str = None, region: str = None, endpoint_url: str = None,
                 access_key: str = None, secret_key: str = None,
                 local_root: str = 'outputs', url_expiry: int = 604800):
        self.bucket = bucket or None
        self.local_root = local_root
        self.url_expiry = url_expiry
        self.s3_client = None

        if self.bucket:
            self.s3_client = boto3.client(
                's3',
                region_name=region,
                endpoint_url=endpoint_url,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key
            )
            logger.info(f"S3 storage initialized for bucket {self.bucket}")

    @classmethod
    def from_config(cls, config) -> 'StorageService':
        return cls(
            bucket=config.get('STORAGE_BUCKET'),
            region=config.get('STORAGE_REGION'),
            endpoint_url=config.get('STORAGE_ENDPOINT_URL'),
            access_key=config.get('AWS_ACCESS_KEY_ID'),
            secret_key=config.get('AWS_SECRET_ACCESS_KEY'),
            local_root=config.get('OUTPUT_FOLDER', 'outputs'),
            url_expiry=config.get('STORAGE_URL_EXPIRY', 604800)
        )

    @property
    def is_remote(self) -> bool:
        return self.s3_client is not None

    def upload(self, data: bytes, filename: str, folder: str = 'uploads',
               content_type: Optional[str] = None) -> Dict[str, Any]:
        """
        Store bytes under folder/filename.

        Returns:
            {url, filename, key, storage_type}
        """
        safe_name = secure_filename(filename) or 'file'
        safe_folder = secure_filename(folder) or 'uploads'
        key = f"{safe_folder}/{safe_name}"
        if not content_type:
            content_type = mimetypes.guess_type(safe_name)[0] or 'application/octet-stream'

        if self.s3_client:
            try:
                self.s3_client.put_object(
                    Bucket=self.bucket,
                    Key=key,
                    Body=data,
                    ContentType=content_type
                )
                url = self.s3_client.generate_presigned_url(
                    'get_object',
                    Params={'Bucket': self.bucket, 'Key': key},
                    ExpiresIn=self.url_expiry
                )
            except (BotoCoreError, ClientError) as e:
                logger.error(f"S3 upload failed for {key}: {e}")
                raise StorageError(f"Failed to upload {safe_name}") from e

            logger.info(f"Uploaded {key} to bucket {self.bucket}")
            return {'url': url, 'filename': safe_name, 'key': key, 'storage_type': 's3'}

        directory = os.path.join(self.local_root, safe_folder)
        os.makedirs(directory, exist_ok=True)
        path = os.path.join(directory, safe_name)
        with open(path, 'wb') as f:
            f.write(data)

        logger.info(f"Saved {key} to local storage")
        return {
            'url': f"/api/files/{safe_folder}/{safe_name}",
            'filename': safe_name,
            'key': key,
            'storage_type': 'local',
        }

    def upload_pdf(self, data: bytes, filename: str, folder: str = 'documents') -> Dict[str, Any]:
        if not filename.lower().endswith('.pdf'):
            filename = f"{filename}.pdf"
        return self.upload(data, filename, folder, content_type='application/pdf')

    def local_path(self, folder: str, filename: str) -> Optional[str]:
        """Absolute path of a locally stored file, or None when absent."""
        path = os.path.join(self.local_root, secure_filename(folder), secure_filename(filename))
        return os.path.abspath(path) if os.path.isfile(path) else None
