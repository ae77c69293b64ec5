"""Error kinds raised while producing a vocabulary image.

Each error carries the HTTP status and the message returned to the caller.
Failures that the handler recovers from (cache lookup, storage upload and
cache write) are logged where they happen and never raised.
"""


class VocabularyImageError(Exception):
    """Base class for errors surfaced to the caller."""

    status_code = 500
    message = 'Failed to generate image'

    def __init__(self, message=None):
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_dict(self):
        return {'error': self.message}


class BadRequest(VocabularyImageError):
    status_code = 400
    message = 'Vocabulary word is required'


class PaymentRequired(VocabularyImageError):
    status_code = 402
    message = 'Payment required, please add funds.'


class RateLimited(VocabularyImageError):
    status_code = 429
    message = 'Rate limit exceeded, please try again later.'


class GenerationFailed(VocabularyImageError):
    status_code = 500
    message = 'Failed to generate image'


class NoImageProduced(VocabularyImageError):
    status_code = 500
    message = 'No image generated'


class GenerationNotConfigured(VocabularyImageError):
    status_code = 500
    message = 'AI_GATEWAY_API_KEY is not configured'


class RequestTimeout(VocabularyImageError):
    status_code = 504
    message = 'Image generation timed out, please try again.'
