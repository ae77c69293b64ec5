"""Database models for the vocabulary image service."""

from .vocabulary_image import VocabularyImage

__all__ = ['VocabularyImage']
