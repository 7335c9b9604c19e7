from copy import deepcopy
from typing import Any, Optional, TypeVar

from pydantic import BaseModel, create_model
from pydantic.fields import FieldInfo

ModelT = TypeVar("ModelT", bound=type[BaseModel])


def optional(model: ModelT) -> ModelT:
    """
    Class decorator turning every field of a pydantic model into an optional
    field defaulting to None, for partial update payloads.

    Field constraints are kept; ``model_dump(exclude_unset=True)`` yields only
    the fields the client sent.
    """

    fields: dict[str, Any] = {}
    for name, field in model.model_fields.items():
        new_field: FieldInfo = deepcopy(field)
        new_field.default = None
        new_field.default_factory = None
        fields[name] = (Optional[field.annotation], new_field)  # type: ignore[valid-type]

    return create_model(  # type: ignore[call-overload]
        model.__name__,
        __base__=model,
        __module__=model.__module__,
        __doc__=model.__doc__,
        **fields,
    )
