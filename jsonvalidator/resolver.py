"""Registry of schema documents used to resolve ``$ref`` values.

References are resolved synchronously against documents registered up front;
nothing is fetched over the network. A reference is split into a document URI
and a JSON Pointer fragment, and the fragment is resolved with ``jsonpointer``.
"""

import logging
from typing import Any, Dict, Mapping, Optional, Tuple
from urllib.parse import unquote, urldefrag, urljoin

import jsonpointer
from jsonpointer import JsonPointerException

from jsonvalidator.helpers import SchemaError

logger = logging.getLogger(__name__)


def schema_id(schema: Any) -> Optional[str]:
    """Returns the ``$id`` (or draft-03/04 ``id``) of a schema node, if any."""
    if not isinstance(schema, Mapping):
        return None
    value = schema.get('$id', schema.get('id'))
    return value if isinstance(value, str) and value else None


class SchemaRegistry:
    """Schemas addressable by URI.

    Attributes:
        schemas: Maps absolute URIs (without a trailing empty fragment) to
            schema nodes
    """

    def __init__(self) -> None:
        self.schemas: Dict[str, Any] = {}

    def add_schema(self, schema: Mapping[str, Any], uri: Optional[str] = None) -> str:
        """Registers a schema document and every nested node that declares an id.

        Args:
            schema: The schema document
            uri: URI to register the document under; defaults to its id

        Returns:
            The URI the document was registered under

        Raises:
            SchemaError: If neither a URI nor an id is available
        """
        uri = uri or schema_id(schema)
        if not uri:
            raise SchemaError("Cannot register a schema without an id or uri", schema)
        base, _ = urldefrag(uri)
        logger.debug("Registering schema '%s'", base)
        self.schemas[base] = schema
        self._index_ids(schema, base, is_root=True)
        return base

    def _index_ids(self, node: Any, base: str, is_root: bool = False) -> None:
        if isinstance(node, Mapping):
            node_id = schema_id(node)
            if node_id and not is_root:
                uri = urljoin(base, node_id) if base else node_id
                self.schemas.setdefault(uri.rstrip('#'), node)
                base = urldefrag(uri)[0] or base
            for key, value in node.items():
                if key in ('enum', 'default'):
                    continue
                self._index_ids(value, base)
        elif isinstance(node, list):
            for item in node:
                self._index_ids(item, base)

    def get_schema(self, uri: str) -> Optional[Any]:
        return self.schemas.get(uri.rstrip('#'))

    def resolve(self, ref: str, base_uri: str = '', root: Any = None) -> Tuple[Any, str, Any]:
        """Resolves a ``$ref`` value.

        Args:
            ref: The reference, absolute or relative to base_uri
            base_uri: The URI of the document containing the reference
            root: The document containing the reference, used when it is not
                registered

        Returns:
            Tuple of the target schema, the URI of the document it lives in and
            that document

        Raises:
            SchemaError: If the document or the fragment cannot be found
        """
        full_uri = urljoin(base_uri, ref) if base_uri else ref
        direct = self.get_schema(full_uri)
        if direct is not None:
            document_uri = urldefrag(full_uri)[0]
            return direct, document_uri, self.schemas.get(document_uri, direct)

        document_uri, fragment = urldefrag(full_uri)
        if document_uri:
            document = self.schemas.get(document_uri)
            if document is None and document_uri == urldefrag(base_uri)[0]:
                document = root
        else:
            document = root
        if document is None:
            raise SchemaError(f"no such schema <{ref}>")
        if not fragment:
            return document, document_uri, document
        try:
            target = jsonpointer.resolve_pointer(document, unquote(fragment))
        except JsonPointerException as e:
            raise SchemaError(f"Cannot resolve $ref {ref}: {e}") from e
        logger.debug("Resolved $ref '%s' in '%s'", ref, document_uri or '<root>')
        return target, document_uri, document
