from .base import SimilarityBackend
from .client import HttpSimilarityBackend

__all__ = ["SimilarityBackend", "HttpSimilarityBackend"]
