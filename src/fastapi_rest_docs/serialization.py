"""Document serialization — JSON and YAML renderings of one document."""

from __future__ import annotations

import json

import yaml

from fastapi_rest_docs._types import OpenAPIDocument


def to_json(document: OpenAPIDocument) -> str:
    """Serialize a document as indented JSON, keeping key order."""
    return json.dumps(document, indent=2, ensure_ascii=False)


def to_yaml(document: OpenAPIDocument) -> str:
    """Serialize a document as YAML.

    The YAML is produced from the JSON rendering, so both loaded forms
    are structurally equal.
    """
    return yaml.safe_dump(
        json.loads(to_json(document)),
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )
