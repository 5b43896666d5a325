"""
Internal $ref resolution for OpenAPI documents.
"""
import logging
from typing import Any, Dict, Optional
from urllib.parse import unquote

logger = logging.getLogger(__name__)


def _decode_segment(segment: str) -> str:
    """Decode a JSON pointer segment (~1 -> '/', ~0 -> '~')."""
    return unquote(segment).replace('~1', '/').replace('~0', '~')


def resolve(ref: str, document: Dict[str, Any]) -> Optional[Any]:
    """
    Resolve an internal reference such as '#/components/schemas/User'.

    Only the referenced node is returned; a node that is itself a $ref is
    not followed, callers recurse when they need to.

    Args:
        ref: Reference string
        document: Parsed specification document

    Returns:
        The referenced node, or None for external or dangling references
    """
    if not isinstance(ref, str) or not ref.startswith('#/'):
        logger.debug(f"Skipping unsupported reference: {ref}")
        return None

    current: Any = document
    for part in ref[2:].split('/'):
        key = _decode_segment(part)
        if isinstance(current, dict) and key in current:
            current = current[key]
        elif isinstance(current, list) and key.isdigit() and int(key) < len(current):
            current = current[int(key)]
        else:
            logger.debug(f"Reference not found: {ref}")
            return None

    return current


class SchemaResolver:
    """Resolve $ref pointers against a single document."""

    def __init__(self, document: Dict[str, Any]):
        self.document = document

    def resolve(self, ref: str) -> Optional[Any]:
        return resolve(ref, self.document)

    def deref(self, node: Any, max_hops: int = 16) -> Any:
        """Follow a chain of $refs until a concrete node is reached."""
        hops = 0
        while isinstance(node, dict) and '$ref' in node and hops < max_hops:
            node = self.resolve(node['$ref'])
            hops += 1
        if isinstance(node, dict) and '$ref' in node:
            logger.warning(f"Reference chain too long or cyclic: {node['$ref']}")
            return None
        return node
