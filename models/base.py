"""
Base schemas and the payload parsing boundary.

Backend payloads are camelCase JSON; console code works with snake_case
attributes. ApiSchema bridges the two. parse_payload() validates a raw
body and returns a tagged result instead of trusting its shape.
"""

from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    """
    Base for console-side schemas (form input, view models).

    Features:
        - Auto-trim whitespace from strings
        - Validate on attribute assignment
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True
    )


class ApiSchema(BaseModel):
    """
    Base for backend payloads.

    Fields are declared snake_case and read/written as camelCase.
    Unknown fields are ignored so backend additions do not break parsing.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore"
    )

    def to_payload(self) -> dict:
        """Serialize for the backend: camelCase keys, unset/None fields dropped."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class ActionResponse(ApiSchema):
    """Generic {success, message} envelope used by mutations."""
    success: bool
    message: Optional[str] = None


# ===================
# PARSING BOUNDARY
# ===================

T = TypeVar("T", bound=BaseModel)


@dataclass
class PayloadOk(Generic[T]):
    """Payload matched its schema."""
    value: T
    ok: bool = field(default=True, init=False)


@dataclass
class PayloadInvalid:
    """Payload did not match its schema."""
    schema: str
    errors: list[dict]
    ok: bool = field(default=False, init=False)


ParsedPayload = Union[PayloadOk[T], PayloadInvalid]


def parse_payload(model: type[T], payload: Any) -> ParsedPayload:
    """
    Validate a raw backend body against a schema.

    Args:
        model: Expected pydantic model
        payload: Decoded JSON body

    Returns:
        PayloadOk with the parsed model, or PayloadInvalid with error list
    """
    try:
        return PayloadOk(model.model_validate(payload))
    except PydanticValidationError as e:
        errors = [
            {"loc": ".".join(str(p) for p in err["loc"]), "msg": err["msg"]}
            for err in e.errors()
        ]
        return PayloadInvalid(schema=model.__name__, errors=errors)
