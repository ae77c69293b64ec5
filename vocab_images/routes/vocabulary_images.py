"""Vocabulary image routes.

A single POST endpoint turns a (word, language) pair into an illustration
URL. CORS preflight (OPTIONS) is answered by flask-cors.
"""

from flask import Blueprint, request, jsonify
import logging

from vocab_images.errors import VocabularyImageError
from vocab_images.services import image_generation, storage
from vocab_images.services.vocabulary_images import (
    get_vocabulary_image,
    count_cached_images,
    SUPPORTED_LANGUAGES
)

vocabulary_images_bp = Blueprint('vocabulary_images', __name__)
logger = logging.getLogger(__name__)


@vocabulary_images_bp.route('', methods=['POST'])
def generate_vocabulary_image():
    """Return a cached or freshly generated image for a vocabulary word.

    Body:
        vocabulary: Word or phrase to illustrate (required)
        language: 'vi' or 'zh'
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}

    try:
        result = get_vocabulary_image(data.get('vocabulary'), data.get('language'))
    except VocabularyImageError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        logger.error(f"Error generating vocabulary image: {e}")
        return jsonify({'error': str(e) or 'Unknown error'}), 500

    return jsonify(result), 200


@vocabulary_images_bp.route('/status', methods=['GET'])
def vocabulary_images_status():
    """Report which collaborators are configured and how many images are cached."""
    try:
        cached_entries = count_cached_images()
    except Exception as e:
        logger.error(f"Could not count cached images: {e}")
        cached_entries = None

    return jsonify({
        'configured': {
            'storage': storage.is_storage_configured(),
            'generation': image_generation.is_generation_configured(),
        },
        'languages': SUPPORTED_LANGUAGES,
        'cached_entries': cached_entries
    }), 200
