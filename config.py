"""
Configuration for the Embed Rendering Pipeline.
"""

import os
from dotenv import load_dotenv
from typing import Dict, Any

# Load environment variables (optional - only if .env file exists)
load_dotenv()


class Config:
    """Pipeline configuration."""

    # Logging Configuration
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Sentence boundary strategy: 'linguistic' (spaCy) or 'heuristic' (punctuation regex)
    SENTENCE_CLASSIFIER = os.environ.get('SENTENCE_CLASSIFIER', 'linguistic').lower()

    # SpaCy model settings - empty means blank English pipeline with the rule sentencizer
    SPACY_MODEL = os.environ.get('SPACY_MODEL', '')

    # Document trees deeper than this are treated as malformed
    MAX_TRAVERSAL_DEPTH = int(os.environ.get('MAX_TRAVERSAL_DEPTH', 100))

    # Rendering marks
    INTERNAL_NOTE_COLOR = '#505258'
    UNSET_VARIABLE_MARK = 'code'

    # Canonical hash settings
    HASH_ALGORITHM = os.environ.get('HASH_ALGORITHM', 'sha256')

    # Vocabulary files (abbreviations, proper nouns)
    VOCABULARY_DIR = os.environ.get(
        'VOCABULARY_DIR',
        os.path.join(os.path.dirname(os.path.abspath(__file__)), 'detection', 'config')
    )

    @classmethod
    def get_detection_config(cls) -> Dict[str, Any]:
        """Get occurrence detection configuration."""
        return {
            'sentence_classifier': cls.SENTENCE_CLASSIFIER,
            'spacy_model': cls.SPACY_MODEL,
            'vocabulary_dir': cls.VOCABULARY_DIR,
            'max_depth': cls.MAX_TRAVERSAL_DEPTH
        }

    @classmethod
    def get_rendering_config(cls) -> Dict[str, Any]:
        """Get rendering pipeline configuration."""
        return {
            'internal_note_color': cls.INTERNAL_NOTE_COLOR,
            'unset_variable_mark': cls.UNSET_VARIABLE_MARK,
            'max_depth': cls.MAX_TRAVERSAL_DEPTH
        }

    @classmethod
    def get_hashing_config(cls) -> Dict[str, Any]:
        """Get canonical hashing configuration."""
        return {
            'algorithm': cls.HASH_ALGORITHM
        }


# For testing only
class TestingConfig(Config):
    """Testing configuration."""
    LOG_LEVEL = 'DEBUG'
    SENTENCE_CLASSIFIER = 'heuristic'
    SPACY_MODEL = ''
