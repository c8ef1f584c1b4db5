"""
Compiling a document from hand-written route definitions.

Demonstrates:
- Declaring operations with RouteDefinition / OperationMetadata
- Resolving them through an InMemoryRouteResolver
- Compiling once and writing the YAML document to stdout
"""

import asyncio
from dataclasses import dataclass

from fastapi_rest_docs import (
    DocumentCompiler,
    InMemoryRouteResolver,
    OperationMetadata,
    RequestBody,
    ResponseSpec,
    RouteDefinition,
    get_config,
    to_yaml,
)


@dataclass
class Invoice:
    number: str
    total: float


resolver = InMemoryRouteResolver(
    {
        "/invoices": RouteDefinition(
            methods={
                "get": OperationMetadata(
                    summary="List invoices",
                    query_schema={
                        "type": "object",
                        "properties": {"year": {"type": "integer"}},
                    },
                    responses=(
                        ResponseSpec(
                            status=200,
                            schema={"type": "array", "items": {"type": "object"}},
                        ),
                    ),
                ),
                "post": OperationMetadata(
                    summary="Create an invoice",
                    request_body=RequestBody(schema=Invoice, required=True),
                    responses=(ResponseSpec(status=201, schema=Invoice),),
                ),
            }
        ),
    }
)


async def main() -> None:
    compiler = DocumentCompiler(
        get_config(openapi_document={"info": {"title": "Billing"}}), resolver
    )
    document = await compiler.compile()
    print(to_yaml(document))


if __name__ == "__main__":
    asyncio.run(main())
