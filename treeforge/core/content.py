import logging
import os

from treeforge.core.config import get_config
from treeforge.core.errors import FilesystemError, InvalidInput
from treeforge.core.models.tree import Node

log = logging.getLogger(__name__)


def write_content(node: Node, content: bytes, *, truncate: bool = False) -> None:
    """Write content at the beginning of the node's file, creating the file if needed.

    The file is not truncated unless truncate is set: writing shorter content over a
    longer one leaves the old trailing bytes in place.

    :raises InvalidInput: if node is a directory
    :raises FilesystemError: if the file cannot be opened or written
    """
    if node.is_dir:
        raise InvalidInput(f"Cannot write content to {node.full_path}: it is a directory")

    try:
        fd = os.open(node.full_path, os.O_RDWR | os.O_CREAT, get_config().content_create_mode)
    except OSError as e:
        raise FilesystemError(
            f"Failed to open {node.full_path} for writing: {e.strerror}", path=node.full_path
        ) from e

    try:
        with os.fdopen(fd, "r+b") as f:
            f.write(content)
            if truncate:
                f.truncate()
    except OSError as e:
        raise FilesystemError(
            f"Failed to write to {node.full_path}: {e.strerror}", path=node.full_path
        ) from e

    log.debug("Wrote %d bytes to %s", len(content), node.full_path)
