#!/usr/bin/env python3
"""Script to purge cached images for a vocabulary word so it is regenerated."""

import sys
import os

# Add parent directory to path to import app modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from vocab_images import create_app, db
from vocab_images.models import VocabularyImage
from vocab_images.services.vocabulary_images import (
    normalize_vocabulary_key,
    normalize_language,
    purge_cached_images
)


def purge_vocabulary_image(vocabulary: str, language: str = None) -> int:
    """Delete cached images for a word after confirmation.

    Args:
        vocabulary: Word to purge (will be normalized)
        language: Optional language tag (vi, zh); all languages when omitted

    Returns:
        Number of cache entries deleted
    """
    vocabulary_key = normalize_vocabulary_key(vocabulary)

    print(f"Looking for cached images with key: {vocabulary_key}")

    query = VocabularyImage.query.filter_by(vocabulary_key=vocabulary_key)
    if language:
        query = query.filter_by(language=normalize_language(language))
    entries = query.all()

    if not entries:
        print(f"❌ No cached images found for: {vocabulary_key}")
        return 0

    print(f"\n📋 Found {len(entries)} cached image(s):")
    for entry in entries:
        print(f"   [{entry.language}] {entry.image_url} (created {entry.created_at})")

    print(f"\n⚠️  WARNING: Stored images will be deleted and regenerated on next request!")
    confirm = input("Type 'PURGE' to confirm: ")

    if confirm != 'PURGE':
        print("❌ Purge cancelled.")
        return 0

    try:
        deleted = purge_cached_images(vocabulary, language)
        print(f"\n✅ Purged {deleted} cached image(s) for {vocabulary_key}")
        return deleted
    except Exception as e:
        db.session.rollback()
        print(f"\n❌ Error purging cached images: {str(e)}")
        return 0


if __name__ == '__main__':
    if len(sys.argv) not in (2, 3):
        print("Usage: python purge_vocabulary_image.py <vocabulary> [language]")
        print("Example: python purge_vocabulary_image.py 'xin chào' vi")
        print("Example: python purge_vocabulary_image.py 你好")
        sys.exit(1)

    vocabulary = sys.argv[1]
    language = sys.argv[2] if len(sys.argv) == 3 else None

    # Create Flask app context
    app = create_app()
    with app.app_context():
        purge_vocabulary_image(vocabulary, language)
