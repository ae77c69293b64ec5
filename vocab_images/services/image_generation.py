"""Illustration generation through the AI gateway (chat completions API)."""
import base64
import logging
import re

import requests
from flask import current_app

from vocab_images.errors import (
    GenerationFailed,
    GenerationNotConfigured,
    NoImageProduced,
    PaymentRequired,
    RateLimited,
    RequestTimeout,
)

logger = logging.getLogger(__name__)

LANGUAGE_NAMES = {
    'vi': 'Vietnamese',
    'zh': 'Chinese',
}

PROMPT_TEMPLATE = (
    'Create a simple, colorful, cartoon-style illustration for the {language_name} '
    'vocabulary word: "{vocabulary}". The image should be cute, educational, and '
    'clearly represent the meaning of the word. No text in the image, just a clear '
    'visual representation. Style: flat design, vibrant colors, minimal background, '
    'centered composition.'
)

_DATA_URL_PREFIX = re.compile(r'^data:image/\w+;base64,')


def is_generation_configured() -> bool:
    return bool(current_app.config.get('AI_GATEWAY_API_KEY'))


def build_prompt(vocabulary: str, language: str) -> str:
    """Build the illustration prompt for a word in the given language."""
    language_name = LANGUAGE_NAMES.get(language, LANGUAGE_NAMES['vi'])
    return PROMPT_TEMPLATE.format(language_name=language_name, vocabulary=vocabulary)


def extract_image(data: dict):
    """Return the embedded image (a data URL) from a gateway response, if any."""
    try:
        return data['choices'][0]['message']['images'][0]['image_url']['url']
    except (KeyError, IndexError, TypeError):
        return None


def decode_image(image: str) -> bytes:
    """Decode a base64 data URL (or bare base64 string) to raw bytes."""
    return base64.b64decode(_DATA_URL_PREFIX.sub('', image), validate=True)


def generate_image(vocabulary: str, language: str) -> str:
    """
    Ask the gateway for an illustration of ``vocabulary``.

    Returns the image as a base64 data URL. Nothing is retried: rate limits,
    billing problems and timeouts are raised straight to the caller.
    """
    api_key = current_app.config.get('AI_GATEWAY_API_KEY')
    if not api_key:
        raise GenerationNotConfigured()

    url = current_app.config['AI_GATEWAY_URL']
    timeout = current_app.config.get('IMAGE_GENERATION_TIMEOUT', 30)
    payload = {
        'model': current_app.config['IMAGE_MODEL'],
        'messages': [
            {
                'role': 'user',
                'content': build_prompt(vocabulary, language),
            }
        ],
        'modalities': ['image', 'text'],
    }
    headers = {
        'Authorization': f'Bearer {api_key}',
        'Content-Type': 'application/json',
    }

    logger.info("Calling AI gateway...")
    try:
        response = requests.post(url, json=payload, headers=headers, timeout=timeout)
    except requests.Timeout:
        logger.error(f"AI gateway timed out after {timeout}s")
        raise RequestTimeout()
    except requests.RequestException as e:
        logger.error(f"AI gateway request error: {e}")
        raise GenerationFailed()

    if not response.ok:
        logger.error(f"AI gateway error: {response.status_code} {response.text}")
        if response.status_code == 429:
            raise RateLimited()
        if response.status_code == 402:
            raise PaymentRequired()
        raise GenerationFailed()

    try:
        data = response.json()
    except ValueError:
        logger.error("AI gateway returned a non-JSON body")
        raise GenerationFailed()

    logger.info("AI response received")

    image = extract_image(data)
    if not image:
        logger.error("No image in AI response")
        raise NoImageProduced()

    return image
