import textwrap
from os import PathLike
from typing import ClassVar, Optional, Union

_argument_not_specified = "__argument_not_specified__"


class TreeforgeError(Exception):
    """Root of the error hierarchy. Don't raise this directly, use more specific error types."""

    is_invalid_usage: ClassVar[bool] = False
    default_solution: ClassVar[Optional[str]] = None

    def __init__(
        self,
        reason: str,
        *,
        solution: Optional[str] = _argument_not_specified,
        docs: Optional[str] = None,
    ) -> None:
        """Initialize a treeforge error.

        :param reason: explain what went wrong
        :param solution: politely suggest a potential solution to the user
        :param docs: include a link to relevant documentation (if there is any)
        """
        super().__init__(reason)
        if solution == _argument_not_specified:
            self.solution = self.default_solution
        else:
            self.solution = solution
        self.docs = docs

    def friendly_msg(self) -> str:
        """Return the user-friendly representation of this error."""
        msg = str(self)
        if self.solution:
            msg += f"\n{textwrap.indent(self.solution, prefix='  ')}"
        if self.docs:
            msg += f"\n  Docs: {self.docs}"
        return msg


class UsageError(TreeforgeError):
    """Generic error for "treeforge was used incorrectly." Prefer more specific errors."""

    is_invalid_usage: ClassVar[bool] = True


class InvalidInput(UsageError):
    """User input was invalid (a node name, a layout file, a config file...)."""


class WorkingDirectoryError(TreeforgeError):
    """The current working directory could not be resolved while building the root node."""

    default_solution = (
        "The directory you are running from may have been removed or is not accessible.\n"
        "Please change to an existing directory and try again."
    )


class FilesystemError(TreeforgeError):
    """A directory or file could not be created, opened, read, written or chmod-ed.

    Nothing that was already created on disk is removed when this error is raised.
    """

    default_solution = (
        "Please check that the target location is writable and does not already exist.\n"
        "Note that treeforge does not roll back: anything created before the failure "
        "is left on disk."
    )

    def __init__(
        self,
        reason: str,
        *,
        path: Union[str, PathLike[str], None] = None,
        solution: Optional[str] = _argument_not_specified,
        docs: Optional[str] = None,
    ) -> None:
        """Initialize a filesystem error.

        :param reason: explain what went wrong
        :param path: the path that the failing operation was working on
        :param solution: politely suggest a potential solution to the user
        :param docs: include a link to relevant documentation (if there is any)
        """
        super().__init__(reason, solution=solution, docs=docs)
        self.path = path


class UnexpectedFormat(UsageError):
    """treeforge failed to parse a file the user provided (e.g. a layout file)."""

    default_solution = "Please check if the format of your file is correct."
