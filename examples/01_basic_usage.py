"""
Basic usage example of fastapi-rest-docs.

Demonstrates:
- Documenting every route of a FastAPI app with mount_docs()
- Attaching field-level OpenAPI metadata with OpenAPIMeta
- Serving the JSON spec, the YAML spec and a docs page
"""

from typing import Annotated

from fastapi import FastAPI
from pydantic import BaseModel

from fastapi_rest_docs import OpenAPIMeta, get_config, mount_docs

app = FastAPI(title="Todo API", openapi_url=None, docs_url=None, redoc_url=None)


class Todo(BaseModel):
    id: int
    name: Annotated[str, OpenAPIMeta(example="Buy milk")]
    done: bool = False


TODOS = {1: Todo(id=1, name="Buy milk")}


@app.get("/todos", response_model=list[Todo], summary="List todos", tags=["todos"])
async def list_todos():
    return list(TODOS.values())


@app.get("/todos/{todo_id}", response_model=Todo, tags=["todos"])
async def get_todo(todo_id: int):
    """Fetch a single todo."""
    return TODOS[todo_id]


# Must run after every route is registered
mount_docs(
    app,
    get_config(openapi_document={"info": {"title": "Todo API", "version": "1.0.0"}}),
)

# Run with: uvicorn examples.01_basic_usage:app --reload
# Then open http://localhost:8000/api
