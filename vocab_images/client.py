"""Client-side access to the vocabulary image endpoint.

``VocabularyImageClient`` talks HTTP, ``SessionImageStore`` remembers the
URLs already fetched during one session, and ``VocabularyImageLoader`` is the
per-consumer coordinator that combines both:

    store = SessionImageStore()
    client = VocabularyImageClient('https://example.com')
    loader = VocabularyImageLoader(client, store)
    result = loader.load('xin chào', 'vi')
    if result.has_image:
        show(result.image_url)
    else:
        show_placeholder(placeholder_text('vi'))
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import requests

from vocab_images.services.vocabulary_images import normalize_language, normalize_vocabulary_key

logger = logging.getLogger(__name__)

PLACEHOLDER_TEXT = {
    'vi': 'Không có hình',
    'zh': '暂无图片',
}

LOADING_TEXT = {
    'vi': 'AI đang tạo hình...',
    'zh': 'AI生成中...',
}


def placeholder_text(language: str) -> str:
    """Neutral text shown when no image is available."""
    return PLACEHOLDER_TEXT[normalize_language(language)]


def loading_text(language: str) -> str:
    """Text shown while an image is being generated."""
    return LOADING_TEXT[normalize_language(language)]


class ImageFetchError(Exception):
    """The endpoint did not return a usable image URL."""


class RequestState(Enum):
    IDLE = 'idle'
    PENDING = 'pending'
    RESOLVED = 'resolved'
    FAILED = 'failed'


@dataclass(frozen=True)
class ImageResult:
    state: RequestState = RequestState.IDLE
    image_url: Optional[str] = None
    error: Optional[str] = None

    @property
    def loading(self) -> bool:
        return self.state is RequestState.PENDING

    @property
    def has_image(self) -> bool:
        return self.state is RequestState.RESOLVED and bool(self.image_url)


NO_IMAGE = ImageResult()


def session_key(vocabulary: str, language: str) -> tuple:
    return normalize_vocabulary_key(vocabulary), normalize_language(language)


class SessionImageStore:
    """Image URLs fetched during one client session.

    Create one per session and drop it with the session; nothing is
    persisted or shared between sessions.
    """

    def __init__(self):
        self._urls = {}
        self._lock = threading.Lock()

    def get(self, vocabulary: str, language: str) -> Optional[str]:
        with self._lock:
            return self._urls.get(session_key(vocabulary, language))

    def put(self, vocabulary: str, language: str, image_url: str):
        with self._lock:
            self._urls[session_key(vocabulary, language)] = image_url

    def clear(self):
        with self._lock:
            self._urls.clear()

    def __contains__(self, pair) -> bool:
        vocabulary, language = pair
        return self.get(vocabulary, language) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._urls)


class VocabularyImageClient:
    """HTTP client for the vocabulary image endpoint."""

    def __init__(self, base_url: str = '', session=None, path: str = '/api/vocabulary-images',
                 timeout: float = 60, headers: Optional[dict] = None):
        self.url = f"{base_url.rstrip('/')}{path}"
        self.session = session or requests.Session()
        self.timeout = timeout
        self.headers = headers or {}

    def fetch_image_url(self, vocabulary: str, language: str) -> str:
        """POST one (word, language) pair and return the image URL."""
        try:
            response = self.session.post(
                self.url,
                json={'vocabulary': vocabulary.strip(), 'language': language},
                headers=self.headers,
                timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error(f"Vocabulary image request failed: {e}")
            raise ImageFetchError('Failed to generate image') from e

        try:
            data = response.json()
        except ValueError:
            data = None

        if not isinstance(data, dict):
            raise ImageFetchError(f'Unexpected response from image service ({response.status_code})')

        if response.status_code >= 400 or data.get('error'):
            raise ImageFetchError(data.get('error') or f'Image service error ({response.status_code})')

        image_url = data.get('imageUrl')
        if not image_url:
            raise ImageFetchError('Failed to generate image')

        logger.info(f"Got image URL: {image_url}, cached: {data.get('cached')}")
        return image_url


class VocabularyImageLoader:
    """Coordinates image requests for a single consumer.

    At most one request is in flight per loader. A response that arrives
    after the input changed, or after ``close()``, is dropped.
    """

    def __init__(self, client: VocabularyImageClient, store: SessionImageStore):
        self.client = client
        self.store = store
        self._lock = threading.Lock()
        self._generation = 0
        self._key = None
        self._result = NO_IMAGE

    @property
    def result(self) -> ImageResult:
        return self._result

    @property
    def state(self) -> RequestState:
        return self._result.state

    def _invalidate(self):
        self._generation += 1

    def load(self, vocabulary: str, language: str, enabled: bool = True) -> ImageResult:
        """Resolve the image for a word, hitting the network at most once per pair."""
        with self._lock:
            if not enabled or not vocabulary or not vocabulary.strip():
                self._invalidate()
                self._key = None
                self._result = NO_IMAGE
                return self._result

            key = session_key(vocabulary, language)

            cached_url = self.store.get(vocabulary, language)
            if cached_url:
                logger.debug(f"Session cache hit for {key}")
                self._invalidate()
                self._key = key
                self._result = ImageResult(RequestState.RESOLVED, image_url=cached_url)
                return self._result

            if self._result.state is RequestState.PENDING and self._key == key:
                return self._result

            logger.info(f'Fetching vocabulary image for: "{vocabulary}" ({key[1]})')
            self._invalidate()
            token = self._generation
            self._key = key
            self._result = ImageResult(RequestState.PENDING)

        try:
            image_url = self.client.fetch_image_url(vocabulary, key[1])
            outcome = ImageResult(RequestState.RESOLVED, image_url=image_url)
        except ImageFetchError as e:
            logger.error(f"Failed to get vocabulary image: {e}")
            outcome = ImageResult(RequestState.FAILED, error=str(e))
        except Exception as e:
            # The pair must never stay PENDING
            logger.error(f"Unexpected error fetching vocabulary image: {e}")
            outcome = ImageResult(RequestState.FAILED, error=str(e) or 'Failed to generate image')

        with self._lock:
            if token != self._generation:
                logger.debug(f"Dropping stale response for {key}")
                return self._result
            if outcome.state is RequestState.RESOLVED:
                self.store.put(vocabulary, key[1], outcome.image_url)
            self._result = outcome
            return self._result

    def close(self):
        """Stop caring about any in-flight request."""
        with self._lock:
            self._invalidate()
            self._key = None
            self._result = NO_IMAGE
