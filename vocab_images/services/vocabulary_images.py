"""Cache-or-generate service for vocabulary illustrations.

FAST PATH (no gateway call):
- Persistent cache hit for the normalized (word, language) pair

SLOW PATH:
- Generate through the AI gateway
- Upload to Supabase Storage (falls back to the inline image on failure)
- Record the public URL in the cache (best effort)
"""
import binascii
import logging
import time

from sqlalchemy.exc import IntegrityError

from vocab_images import db
from vocab_images.errors import BadRequest, NoImageProduced
from vocab_images.services import image_generation, storage

logger = logging.getLogger(__name__)

SUPPORTED_LANGUAGES = ['vi', 'zh']
DEFAULT_LANGUAGE = 'vi'


def normalize_vocabulary_key(vocabulary: str) -> str:
    """Trim, lower-case and collapse whitespace runs into a single underscore."""
    return '_'.join(vocabulary.lower().split())


def normalize_language(language) -> str:
    """Map a language tag onto the supported set, defaulting to Vietnamese."""
    if not language or not isinstance(language, str):
        return DEFAULT_LANGUAGE
    language = language.strip().lower()[:2]
    if language not in SUPPORTED_LANGUAGES:
        return DEFAULT_LANGUAGE
    return language


def build_file_name(vocabulary_key: str, language: str) -> str:
    """Object name for a freshly generated image; the timestamp keeps it unique."""
    return f"{vocabulary_key}_{language}_{int(time.time() * 1000)}.png"


def get_cached_image_url(vocabulary_key: str, language: str):
    """Return the cached image URL, or None on a miss or lookup error."""
    try:
        from vocab_images.models import VocabularyImage
        cached = VocabularyImage.query.filter_by(
            vocabulary_key=vocabulary_key,
            language=language
        ).first()
        return cached.image_url if cached else None
    except Exception as e:
        logger.error(f"Cache lookup error: {e}")
        db.session.rollback()
        return None


def cache_image_url(vocabulary_key: str, language: str, image_url: str) -> bool:
    """Store an image URL in the cache. Returns False if the write failed."""
    from vocab_images.models import VocabularyImage

    try:
        entry = VocabularyImage(
            vocabulary_key=vocabulary_key,
            language=language,
            image_url=image_url
        )
        db.session.add(entry)
        db.session.commit()
    except IntegrityError:
        # A concurrent request cached this pair first; its image is just as good
        db.session.rollback()
        logger.warning(f"Cache entry already exists for {vocabulary_key} ({language})")
        return False
    except Exception as e:
        db.session.rollback()
        logger.error(f"Cache insert error: {e}")
        return False

    logger.info("Image URL cached successfully")
    return True


def get_vocabulary_image(vocabulary, language) -> dict:
    """
    Resolve an illustration for a vocabulary word.

    Args:
        vocabulary: The word or phrase to illustrate
        language: Language tag of the word (vi, zh)

    Returns:
        Dict with ``imageUrl`` and ``cached``

    Raises:
        VocabularyImageError subclasses for failures the caller must see
    """
    if not vocabulary or not isinstance(vocabulary, str) or not vocabulary.strip():
        logger.error("Missing vocabulary parameter")
        raise BadRequest()

    language = normalize_language(language)
    vocabulary_key = normalize_vocabulary_key(vocabulary)

    logger.info(f'Generating image for vocabulary: "{vocabulary}" ({language})')
    logger.info(f"Checking cache for: {vocabulary_key}, {language}")

    cached_url = get_cached_image_url(vocabulary_key, language)
    if cached_url:
        logger.info(f"Cache hit! Returning cached image: {cached_url}")
        return {'imageUrl': cached_url, 'cached': True}

    logger.info("Cache miss, generating new image...")

    image = image_generation.generate_image(vocabulary.strip(), language)

    try:
        image_data = image_generation.decode_image(image)
    except (binascii.Error, ValueError) as e:
        logger.error(f"Could not decode generated image: {e}")
        raise NoImageProduced()
    if not image_data:
        raise NoImageProduced()

    file_name = build_file_name(vocabulary_key, language)
    logger.info(f"Uploading image to storage: {file_name}")

    public_url, error_msg = storage.upload_file(image_data, file_name, 'image/png')
    if error_msg or not public_url:
        logger.warning(f"Storage upload error: {error_msg}")
        # Not durable, but still displayable
        return {'imageUrl': image, 'cached': False}

    logger.info(f"Image uploaded successfully: {public_url}")

    cache_image_url(vocabulary_key, language, public_url)

    return {'imageUrl': public_url, 'cached': False}


def purge_cached_images(vocabulary: str, language=None, delete_files: bool = True) -> int:
    """
    Remove cache entries for a word so the next request regenerates it.

    Args:
        vocabulary: The word whose entries should go
        language: Only purge this language when given
        delete_files: Also remove the stored objects from the bucket

    Returns:
        Number of cache entries deleted
    """
    from vocab_images.models import VocabularyImage

    query = VocabularyImage.query.filter_by(vocabulary_key=normalize_vocabulary_key(vocabulary))
    if language:
        query = query.filter_by(language=normalize_language(language))

    entries = query.all()
    for entry in entries:
        if delete_files:
            deleted, error_msg = storage.delete_file(entry.image_url)
            if not deleted:
                logger.warning(f"Could not delete stored image {entry.image_url}: {error_msg}")
        db.session.delete(entry)

    db.session.commit()
    logger.info(f"Purged {len(entries)} cached image(s) for {vocabulary!r}")
    return len(entries)


def count_cached_images() -> int:
    from vocab_images.models import VocabularyImage
    return VocabularyImage.query.count()
