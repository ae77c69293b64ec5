"""Supabase Storage Service for generated vocabulary images.

Images are written to a single public bucket (``vocabulary-images`` by
default) and served through their stable public URL.
"""

import logging
from typing import Optional, Tuple

from flask import current_app

logger = logging.getLogger(__name__)

# Supabase client (lazy initialization)
_supabase_client = None


def get_supabase_client():
    """Get or create Supabase client (lazy initialization)."""
    global _supabase_client

    if _supabase_client is None:
        url = current_app.config.get('SUPABASE_URL')
        key = current_app.config.get('SUPABASE_SERVICE_KEY')

        if not url or not key:
            logger.warning('Supabase credentials not configured. Storage will not work.')
            return None

        try:
            from supabase import create_client
            _supabase_client = create_client(url, key)
            logger.info('Supabase client initialized successfully')
        except Exception as e:
            logger.error(f'Failed to initialize Supabase client: {e}')
            return None

    return _supabase_client


def reset_client():
    """Forget the cached client so the next call re-reads configuration."""
    global _supabase_client
    _supabase_client = None


def is_storage_configured() -> bool:
    """Check if Supabase storage is properly configured."""
    return get_supabase_client() is not None


def get_bucket_name() -> str:
    return current_app.config.get('VOCABULARY_IMAGES_BUCKET', 'vocabulary-images')


def upload_file(
    file_data: bytes,
    file_name: str,
    content_type: str = 'image/png'
) -> Tuple[Optional[str], Optional[str]]:
    """Upload a file to the vocabulary images bucket.

    Args:
        file_data: Raw file bytes
        file_name: Object path inside the bucket (already unique)
        content_type: MIME type of the file

    Returns:
        Tuple of (public_url, error_message)
        If successful: (url, None)
        If failed: (None, error_message)
    """
    client = get_supabase_client()

    if client is None:
        return None, 'Storage service not configured'

    bucket = get_bucket_name()

    try:
        logger.info(f'Uploading file to {bucket}/{file_name} ({content_type})')

        client.storage.from_(bucket).upload(
            path=file_name,
            file=file_data,
            file_options={"content-type": content_type, "upsert": "true"}
        )

        public_url = client.storage.from_(bucket).get_public_url(file_name)

        logger.info(f'File uploaded successfully: {public_url}')
        return public_url, None

    except Exception as e:
        error_msg = str(e)
        logger.error(f'Upload failed: {error_msg}')
        return None, error_msg


def delete_file(file_url: str) -> Tuple[bool, Optional[str]]:
    """Delete a file from the vocabulary images bucket.

    Args:
        file_url: Full public URL or just the filename

    Returns:
        Tuple of (success, error_message)
    """
    client = get_supabase_client()

    if client is None:
        return False, 'Storage service not configured'

    bucket = get_bucket_name()

    try:
        # Public URLs may carry a trailing "?" from the SDK
        file_name = file_url.split('?')[0].rstrip('/').split('/')[-1]

        logger.info(f'Deleting file from {bucket}/{file_name}')

        client.storage.from_(bucket).remove([file_name])

        logger.info(f'File deleted successfully: {file_name}')
        return True, None

    except Exception as e:
        error_msg = str(e)
        logger.error(f'Delete failed: {error_msg}')
        return False, error_msg
