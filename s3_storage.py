"""
AWS S3 Storage Service

Uploads generated ROI report PDFs and returns their public URL.
"""

import logging
import os
import time
from typing import Optional, Tuple

from dotenv import load_dotenv

from constants import REPORT_CONTENT_TYPE, S3_REPORT_PREFIX

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class S3StorageService:
    """Service for uploading report PDFs to S3."""

    def __init__(self, access_key: Optional[str] = None, secret_key: Optional[str] = None,
                 region: Optional[str] = None, bucket: Optional[str] = None):
        """Initialize S3 storage service, defaulting to credentials from environment."""
        self.access_key = access_key or os.getenv('AWS_ACCESS_KEY_ID')
        self.secret_key = secret_key or os.getenv('AWS_SECRET_ACCESS_KEY')
        self.region = region or os.getenv('AWS_REGION')
        self.bucket = bucket or os.getenv('AWS_S3_BUCKET')

    def is_configured(self) -> Tuple[bool, Optional[str]]:
        """Check if S3 is properly configured.

        Returns:
            Tuple of (is_configured, error_message)
        """
        if not self.access_key:
            return False, "AWS_ACCESS_KEY_ID not set"
        if not self.secret_key:
            return False, "AWS_SECRET_ACCESS_KEY not set"
        if not self.region:
            return False, "AWS_REGION not set"
        if not self.bucket:
            return False, "AWS_S3_BUCKET not set"
        return True, None

    def _get_client(self):
        """Get boto3 S3 client."""
        import boto3

        return boto3.client(
            's3',
            aws_access_key_id=self.access_key,
            aws_secret_access_key=self.secret_key,
            region_name=self.region,
        )

    def build_key(self, file_name: str) -> str:
        """Unique object key: <prefix>/<epoch millis>-<file_name>.pdf"""
        timestamp = int(time.time() * 1000)
        return f"{S3_REPORT_PREFIX}/{timestamp}-{file_name}.pdf"

    def public_url(self, key: str) -> str:
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    def upload_pdf(self, pdf_bytes: bytes, file_name: str) -> Optional[str]:
        """Upload a PDF and return its public URL.

        Args:
            pdf_bytes: PDF document
            file_name: Base name for the object (no extension)

        Returns:
            Public URL string, or None if S3 is not configured or the upload fails
        """
        is_configured, error = self.is_configured()
        if not is_configured:
            logger.warning(f"S3 not configured: {error}")
            return None

        try:
            client = self._get_client()
            key = self.build_key(file_name)

            client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=pdf_bytes,
                ContentType=REPORT_CONTENT_TYPE,
            )

            url = self.public_url(key)
            logger.info(f"Uploaded report to S3: {key} ({len(pdf_bytes):,} bytes)")
            return url

        except Exception as e:
            logger.error(f"Failed to upload to S3: {e}")
            return None


# Module-level convenience function
def upload_report_pdf(pdf_bytes: bytes, file_name: str) -> Optional[str]:
    """Upload a report PDF with environment credentials and return its URL."""
    return S3StorageService().upload_pdf(pdf_bytes, file_name)


if __name__ == "__main__":
    service = S3StorageService()
    is_configured, error = service.is_configured()

    if is_configured:
        print("S3 is configured!")
        print(f"  Bucket: {service.bucket}")
        print(f"  Region: {service.region}")
        print(f"  Example URL: {service.public_url(service.build_key('example'))}")
    else:
        print(f"S3 not configured: {error}")
        print("\nRequired environment variables:")
        print("  AWS_ACCESS_KEY_ID")
        print("  AWS_SECRET_ACCESS_KEY")
        print("  AWS_REGION")
        print("  AWS_S3_BUCKET")
