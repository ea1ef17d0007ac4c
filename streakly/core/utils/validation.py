"""Input validation helpers."""

from __future__ import annotations

from typing import Type, TypeVar

from flask import request
from pydantic import BaseModel, ValidationError

M = TypeVar("M", bound=BaseModel)


def jsonable_errors(exc: ValidationError) -> list[dict]:
    errors = exc.errors(include_url=False)
    for err in errors:
        if "ctx" in err and isinstance(err["ctx"], dict):
            err["ctx"] = {k: str(v) for k, v in err["ctx"].items()}
        # Never echo submitted values back (passwords, tokens).
        err.pop("input", None)
    return errors


def parse_body(schema: Type[M]) -> M:
    """Validate the JSON body; ``ValidationError`` is mapped to 400 by the app."""
    payload = request.get_json(silent=True) or {}
    return schema.model_validate(payload)


def parse_args(schema: Type[M]) -> M:
    return schema.model_validate(request.args.to_dict())
