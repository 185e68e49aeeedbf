# app/utils/s3.py
# optional archive of generated court forms
import boto3
from app.core.config import settings


def s3_configured() -> bool:
    return bool(settings.S3_BUCKET)


def upload_bytes_to_s3(key: str, data: bytes, content_type: str = "application/pdf"):
    if not settings.S3_BUCKET:
        raise RuntimeError("S3 not configured")
    s3 = boto3.client(
        "s3",
        endpoint_url=settings.S3_ENDPOINT,
        aws_access_key_id=settings.S3_ACCESS_KEY,
        aws_secret_access_key=settings.S3_SECRET_KEY,
    )
    s3.put_object(Bucket=settings.S3_BUCKET, Key=key, Body=data, ContentType=content_type)
    return key
