import logging

from minio import Minio

logger = logging.getLogger(__name__)


def get_minio_client(endpoint, access_key, secret_key, secure=False, region=None):
    """
    Initialize and return a MinIO client.

    Args:
        endpoint: host[:port] of the MinIO/S3 server, e.g. 'localhost:9000'
        access_key: access key
        secret_key: secret key
        secure: use HTTPS
        region: bucket region, None to let the server decide

    Returns:
        Minio: Configured MinIO client
    """
    try:
        client = Minio(
            endpoint=endpoint,
            access_key=access_key,
            secret_key=secret_key,
            secure=secure,
            region=region,
        )
        return client
    except Exception as e:
        logger.exception(
            "MinIO Client Initialization Failed",
            extra={
                "endpoint": endpoint,
                "user": access_key,
            },
        )
        raise e
