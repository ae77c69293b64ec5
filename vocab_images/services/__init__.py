"""External services used by the vocabulary image handler."""
