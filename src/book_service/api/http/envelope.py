"""Uniform ``{msg, data}`` JSON envelope for every response, and request body decoding."""

import json
from typing import TypeVar

from fastapi import Request
from loguru import logger
from pydantic import BaseModel, ValidationError
from pydantic_core import PydanticSerializationError
from starlette.responses import Response

from src.book_service.entities.book import Book

JSON_MEDIA_TYPE = "application/json; charset=utf-8"

# Served when an envelope cannot be serialized
JSON_BUILD_ERROR_BODY = b'{"msg": "json error"}'

# Identifier, nothing, one book, or a list of books
EnvelopeData = int | Book | list[Book] | None

ModelT = TypeVar("ModelT", bound=BaseModel)


class Envelope(BaseModel):
    msg: str = ""
    data: EnvelopeData = None

    def render(self) -> bytes:
        """Serialize with two-space indentation, omitting absent values."""
        return json.dumps(
            self.model_dump(mode="json", exclude_none=True),
            indent=2,
            ensure_ascii=False,
        ).encode("utf-8")


def json_result(status_code: int, msg: str = "", data: EnvelopeData = None) -> Response:
    """Build the envelope response, falling back to 400 if it cannot be serialized."""
    try:
        body = Envelope(msg=msg, data=data).render()
    except (ValidationError, PydanticSerializationError, TypeError, ValueError):
        logger.exception("Failed to serialize response envelope")
        return Response(
            content=JSON_BUILD_ERROR_BODY,
            status_code=400,
            media_type=JSON_MEDIA_TYPE,
        )
    return Response(content=body, status_code=status_code, media_type=JSON_MEDIA_TYPE)


class RequestBodyError(ValueError):
    """The request body could not be decoded into the expected structure."""


def _describe(error: ValidationError) -> str:
    parts = []
    for item in error.errors(include_url=False):
        location = ".".join(str(p) for p in item["loc"])
        parts.append(f"{location}: {item['msg']}" if location else item["msg"])
    return "; ".join(parts)


async def read_request_data(request: Request) -> bytes:
    """Read the whole request body. An absent body reads as empty bytes."""
    return await request.body()


async def parse_request_json_into(request: Request, model: type[ModelT]) -> ModelT:
    """Decode the JSON request body into ``model``.

    An empty body and a literal JSON ``null`` are valid input and decode as
    an empty object, so every field takes its default.

    Raises:
        RequestBodyError: If the body is not valid JSON for ``model``.
    """
    data = (await read_request_data(request)).strip()
    if data in (b"", b"null"):
        data = b"{}"
    try:
        return model.model_validate_json(data)
    except ValidationError as e:
        raise RequestBodyError(_describe(e)) from e
