"""
Services backing detection: YAML vocabularies.
"""
from .vocabulary_service import VocabularyService, get_vocabulary_service

__all__ = ['VocabularyService', 'get_vocabulary_service']
