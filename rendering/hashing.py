"""
Canonical Hasher

Digest over a source's authored structure: content, name, category,
variable and toggle definitions and documentation links. Rendered output and
unrelated metadata (timestamps, owners) are not part of it, so the digest
only changes when the author changes something that matters.
"""
import hashlib
import json
import logging
from typing import Any, Dict, Optional, Union

from config import Config
from detection.types import coerce_toggles, coerce_variables
from document_model import DocumentNode

logger = logging.getLogger(__name__)


class CanonicalHasher:
    """Stable digest of a document plus its structural metadata."""

    def __init__(self, algorithm: Optional[str] = None):
        self.algorithm = algorithm or Config.HASH_ALGORITHM
        # Fail on an unknown algorithm now rather than on first use
        hashlib.new(self.algorithm)

    @staticmethod
    def canonical_payload(document: Union[DocumentNode, Dict[str, Any], str, None],
                          metadata: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        metadata = metadata or {}
        content = document.to_dict() if isinstance(document, DocumentNode) else document
        return {
            'content': content,
            'name': metadata.get('name'),
            'category': metadata.get('category'),
            'variables': [variable.to_dict() for variable in coerce_variables(metadata.get('variables'))],
            'toggles': [toggle.to_dict() for toggle in coerce_toggles(metadata.get('toggles'))],
            'documentationLinks': metadata.get('documentationLinks') or [],
        }

    @staticmethod
    def serialize(payload: Dict[str, Any]) -> str:
        """Key-order independent JSON serialization."""
        return json.dumps(payload, sort_keys=True, separators=(',', ':'), ensure_ascii=False)

    def hash(self, document: Union[DocumentNode, Dict[str, Any], str, None],
             metadata: Optional[Dict[str, Any]] = None) -> str:
        serialized = self.serialize(self.canonical_payload(document, metadata))
        digest = hashlib.new(self.algorithm, serialized.encode('utf-8')).hexdigest()
        logger.debug(f"Content hash {digest[:12]}... over {len(serialized)} bytes")
        return digest


def calculate_content_hash(document: Union[DocumentNode, Dict[str, Any], str, None],
                           metadata: Optional[Dict[str, Any]] = None) -> str:
    return CanonicalHasher().hash(document, metadata)
