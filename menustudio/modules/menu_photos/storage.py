import boto3
from botocore.exceptions import ClientError
from supabase import Client
from menustudio.config import settings
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)


class S3Storage:
    def __init__(self):
        if not settings.s3_configured:
            raise ValueError("AWS S3 credentials and bucket name must be configured")

        self.s3_client = boto3.client(
            's3',
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            region_name=settings.aws_region
        )
        self.bucket_name = settings.s3_bucket_name

    def upload_file(self, file_content: bytes, key: str, content_type: str = "image/png") -> str:
        """Upload file to S3 and return its public URL"""
        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=file_content,
                ContentType=content_type
            )
            return f"https://{self.bucket_name}.s3.{settings.aws_region}.amazonaws.com/{key}"
        except ClientError as e:
            logger.error(f"Failed to upload file to S3: {str(e)}")
            raise

    def delete_file(self, key: str) -> bool:
        """Delete file from S3"""
        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=key)
            return True
        except ClientError as e:
            logger.error(f"Failed to delete file from S3: {str(e)}")
            return False


class ImageStorage:
    """Stores images in S3 when configured, otherwise in the Supabase Storage bucket."""

    def __init__(self, supabase: Client, bucket: Optional[str] = None):
        self.supabase = supabase
        self.bucket = bucket or settings.supabase_storage_bucket
        self.s3_storage = None
        try:
            if settings.s3_configured:
                self.s3_storage = S3Storage()
                logger.info("S3 storage initialized successfully")
        except Exception as e:
            logger.warning(f"S3 storage initialization failed ({str(e)}), will use Supabase Storage")
            self.s3_storage = None

    def upload(self, content: bytes, path: str, content_type: str = "image/png") -> str:
        """Upload and return a public URL"""
        if self.s3_storage:
            logger.info(f"Uploading to S3: {path}")
            return self.s3_storage.upload_file(content, path, content_type)
        logger.info(f"Uploading to Supabase Storage: {self.bucket}/{path}")
        bucket = self.supabase.storage.from_(self.bucket)
        bucket.upload(path, content, file_options={"content-type": content_type, "upsert": "false"})
        return bucket.get_public_url(path)

    def remove(self, urls: List[str]) -> None:
        """Best-effort removal of stored objects by their public URL"""
        for url in urls:
            if not url:
                continue
            path = self._path_from_url(url)
            if not path:
                continue
            try:
                if self.s3_storage and self.s3_storage.bucket_name in url:
                    self.s3_storage.delete_file(path)
                else:
                    self.supabase.storage.from_(self.bucket).remove([path])
            except Exception as e:
                logger.warning(f"Failed to delete stored image ({path}): {e}")

    def _path_from_url(self, url: str) -> Optional[str]:
        if url.startswith("data:"):
            return None
        marker = f"/{self.bucket}/"
        if marker in url:
            return url.split(marker, 1)[1].split("?", 1)[0]
        if ".amazonaws.com/" in url:
            return url.split(".amazonaws.com/", 1)[1]
        return None
