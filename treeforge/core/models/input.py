from typing import TYPE_CHECKING, Annotated, Callable, Literal, Optional, TypeVar, Union

import pydantic

from treeforge.core.errors import InvalidInput
from treeforge.core.models.validators import check_node_name, parse_permission

if TYPE_CHECKING:
    from pydantic_core import ErrorDetails


T = TypeVar("T")
ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)

Permission = Annotated[int, pydantic.BeforeValidator(parse_permission)]


def parse_user_input(to_model: Callable[[T], ModelT], input_obj: T) -> ModelT:
    """Parse user input into a model, re-raise validation errors as InvalidInput."""
    try:
        return to_model(input_obj)
    except pydantic.ValidationError as e:
        raise InvalidInput(_present_user_input_error(e)) from e


def _present_user_input_error(validation_error: pydantic.ValidationError) -> str:
    """Make a slightly nicer representation of a pydantic.ValidationError.

    Compared to pydantic's default message:
    - don't show the model name, just say "user input"
    - don't show the underlying error type (e.g. "type=value_error")
    """
    errors = validation_error.errors()
    n_errors = len(errors)

    def show_error(error: "ErrorDetails") -> str:
        location = " -> ".join(map(str, error["loc"]))
        message = error["msg"]

        if location:
            message = f"{location}\n  {message}"

        return message

    header = f"{n_errors} validation error{'' if n_errors == 1 else 's'} for user input"
    details = "\n".join(map(show_error, errors))
    return f"{header}\n{details}"


class _NodeInputBase(pydantic.BaseModel, extra="forbid"):
    """Common attributes accepted for every planned node."""

    name: str

    @pydantic.field_validator("name")
    def _name_is_segment(cls, name: str) -> str:
        return check_node_name(name)


class FileInput(_NodeInputBase):
    """A planned file, optionally with the text to write into it."""

    type: Literal["file"]
    permission: Permission = 0o644
    content: Optional[str] = None


class DirectoryInput(_NodeInputBase):
    """A planned directory and its children, in the order they should be created."""

    type: Literal["directory"]
    permission: Permission = 0o755
    children: list["NodeInput"] = []


NodeInput = Annotated[Union[DirectoryInput, FileInput], pydantic.Field(discriminator="type")]

DirectoryInput.model_rebuild()


class Layout(_NodeInputBase):
    """The root directory of a planned tree.

    The root is always a directory and is created in the current working directory.

    >>> Layout.model_validate(
    ...     {
    ...         "name": "build",
    ...         "permission": "0755",
    ...         "children": [{"type": "file", "name": "README", "content": "hi"}],
    ...     }
    ... )
    """

    permission: Permission = 0o755
    children: list[NodeInput] = []

    @property
    def file_count(self) -> int:
        """Count the planned files in the whole layout."""

        def count(children: list[Union[DirectoryInput, FileInput]]) -> int:
            total = 0
            for child in children:
                if isinstance(child, DirectoryInput):
                    total += count(child.children)
                else:
                    total += 1
            return total

        return count(self.children)
