"""Typed results for data-access actions.

Actions never raise to their caller. Every failure is logged once by
``handle_error`` and returned as a failed ``ActionResult`` so the caller
decides whether to surface, retry or ignore it.
"""

from dataclasses import dataclass
from functools import wraps
from typing import Any, Awaitable, Callable, Dict, Generic, Optional, Type, TypeVar, Union

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from pymongo.errors import DuplicateKeyError, PyMongoError

from ..exceptions import ActionError, DatabaseQueryError, ImaginifyError
from ..logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


@dataclass
class ActionResult(Generic[T]):
    """Outcome of a data-access action."""
    ok: bool
    value: Optional[T] = None
    error: Optional[ImaginifyError] = None

    @classmethod
    def success(cls, value: Optional[T]) -> "ActionResult[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: ImaginifyError) -> "ActionResult[T]":
        return cls(ok=False, error=error)

    def unwrap(self) -> Optional[T]:
        """Return the value, raising the recorded error if the action failed."""
        if not self.ok:
            raise self.error
        return self.value


def handle_error(error: Exception, action: str, **context: Any) -> ActionResult[Any]:
    """Log a failed action and convert the error into a failed result."""
    if isinstance(error, ImaginifyError):
        wrapped = error
    elif isinstance(error, DuplicateKeyError):
        wrapped = DatabaseQueryError.from_exception(
            "Duplicate record", error, {"key": error.details.get("keyValue") if error.details else None}
        )
    elif isinstance(error, PyMongoError):
        wrapped = DatabaseQueryError.from_exception(f"Database operation failed: {error}", error)
    elif isinstance(error, PydanticValidationError):
        wrapped = ActionError.from_exception(
            "Invalid parameters", error, {"errors": error.error_count()}
        )
    else:
        wrapped = ActionError.from_exception(f"Unexpected error: {error}", error)

    logger.error(
        "Data action failed",
        action=action,
        error_type=type(wrapped).__name__,
        error=wrapped.message,
        **context
    )
    return ActionResult.failure(wrapped)


def data_action(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[ActionResult[T]]]:
    """Run an action and funnel any exception through ``handle_error``."""
    @wraps(func)
    async def wrap_func(*args, **kwargs) -> ActionResult[T]:
        try:
            value = await func(*args, **kwargs)
        except Exception as e:
            return handle_error(e, func.__name__)
        return ActionResult.success(value)

    return wrap_func


def coerce_params(model: Type[M], params: Union[M, Dict[str, Any]]) -> M:
    """Accept either a parameter model or a plain mapping of its fields."""
    if isinstance(params, model):
        return params
    return model.model_validate(params)


def to_object_id(value: Union[str, ObjectId], label: str = "id") -> ObjectId:
    """Parse an internal identifier, failing as an action error when malformed."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError) as e:
        raise ActionError.from_exception(f"Invalid {label}", e, {label: value})


def serialize(model: Type[BaseModel], document: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Render a stored document as a JSON-ready mapping."""
    if document is None:
        return None
    return model.model_validate(document).model_dump(mode="json", by_alias=True, exclude_none=True)
