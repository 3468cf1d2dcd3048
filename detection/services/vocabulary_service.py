"""
Detection Vocabulary Service

Manages the YAML vocabularies used by sentence segmentation and smart
casing: abbreviations that do not end sentences and words that are always
capitalized. Files are loaded lazily and cached; lookups never write to the
shared tables after loading.
"""

import logging
import threading
import yaml
from pathlib import Path
from typing import Dict, Any, FrozenSet, List, Optional, Set

from config import Config

logger = logging.getLogger(__name__)

ABBREVIATIONS_FILE = "abbreviations.yaml"
PROPER_NOUNS_FILE = "proper_nouns.yaml"

DEFAULT_ABBREVIATIONS = {
    'titles': ['Dr.', 'Mr.', 'Mrs.', 'Ms.', 'Prof.', 'St.', 'Jr.', 'Sr.'],
    'regions': ['U.S.', 'U.K.', 'E.U.'],
    'latin': ['e.g.', 'i.e.', 'vs.', 'etc.', 'cf.'],
    'references': ['Fig.'],
    'organizations': ['Inc.', 'Ltd.', 'Co.', 'Corp.'],
    'terminal': ['Inc.', 'Ltd.', 'Co.', 'Corp.', 'etc.'],
}

DEFAULT_PROPER_NOUNS = {
    'months': ['january', 'february', 'march', 'april', 'may', 'june', 'july',
               'august', 'september', 'october', 'november', 'december'],
    'weekdays': ['monday', 'tuesday', 'wednesday', 'thursday', 'friday',
                 'saturday', 'sunday'],
    'additional': [],
}


class VocabularyService:
    """
    Service for managing detection vocabularies.

    Features:
    - Lazy loading with caching
    - Thread-safe loading
    - Built-in defaults when a file is missing or unreadable
    """

    def __init__(self, config_dir: Optional[str] = None):
        if config_dir is None:
            config_dir = Config.VOCABULARY_DIR

        self.config_dir = Path(config_dir)
        self._cache: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def _load_yaml_file(self, filename: str, defaults: Dict[str, Any]) -> Dict[str, Any]:
        """Load and cache a YAML vocabulary file."""
        with self._lock:
            if filename in self._cache:
                return self._cache[filename]

            file_path = self.config_dir / filename
            data = defaults
            if not file_path.exists():
                logger.warning(f"Vocabulary file {file_path} not found. Using built-in defaults.")
            else:
                try:
                    with open(file_path, 'r', encoding='utf-8') as f:
                        loaded = yaml.safe_load(f) or {}
                    if isinstance(loaded, dict):
                        data = loaded
                        logger.info(f"Loaded detection vocabulary: {filename}")
                    else:
                        logger.warning(f"Vocabulary file {file_path} is not a mapping. Using built-in defaults.")
                except (yaml.YAMLError, OSError) as e:
                    logger.warning(f"Could not load vocabulary file {file_path}: {e}")

            self._cache[filename] = data
            return data

    def reload_all_vocabularies(self) -> None:
        """Drop cached vocabularies so the next lookup re-reads the files."""
        with self._lock:
            self._cache.clear()

    # === SPECIFIC VOCABULARY ACCESSORS ===

    def get_abbreviations(self) -> FrozenSet[str]:
        """Every abbreviation form that must stay a single token."""
        config = self._load_yaml_file(ABBREVIATIONS_FILE, DEFAULT_ABBREVIATIONS)
        forms: Set[str] = set()
        for values in config.values():
            if isinstance(values, list):
                forms.update(str(value) for value in values if value)
        return frozenset(forms)

    def get_terminal_abbreviations(self) -> FrozenSet[str]:
        """Abbreviations that can also close a sentence."""
        config = self._load_yaml_file(ABBREVIATIONS_FILE, DEFAULT_ABBREVIATIONS)
        return frozenset(str(value) for value in config.get('terminal', []) or [] if value)

    def get_proper_nouns(self) -> FrozenSet[str]:
        """Lowercased words that are always capitalized."""
        config = self._load_yaml_file(PROPER_NOUNS_FILE, DEFAULT_PROPER_NOUNS)
        words: List[str] = []
        for values in config.values():
            if isinstance(values, list):
                words.extend(str(value).strip().lower() for value in values if value)
        return frozenset(words)


_service: Optional[VocabularyService] = None
_service_lock = threading.Lock()


def get_vocabulary_service() -> VocabularyService:
    """Return the process-wide vocabulary service."""
    global _service
    if _service is None:
        with _service_lock:
            if _service is None:
                _service = VocabularyService()
    return _service
