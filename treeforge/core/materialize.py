import logging
import os
from typing import Optional

from treeforge.core.config import get_config
from treeforge.core.errors import FilesystemError
from treeforge.core.models.tree import Node, Tree

log = logging.getLogger(__name__)


def generate(tree: Tree, node: Optional[Node] = None) -> None:
    """Create the planned directories and files on disk, starting at node (default: root).

    Everything is created with the permissive materialize_mode, so that content can be
    written afterwards. The planned permissions are applied later by set_perms().

    Traversal is pre-order and stops at the first failure. Already existing paths are
    a failure too, generating the same tree twice does not work. Nothing created before
    the failure is removed.

    :raises FilesystemError: if a directory or file cannot be created or chmod-ed
    """
    if node is None:
        node = tree.root

    mode = get_config().materialize_mode

    if node.is_dir:
        try:
            os.mkdir(node.full_path, mode)
            # mkdir mode is filtered through the umask
            os.chmod(node.full_path, mode)
        except OSError as e:
            raise FilesystemError(
                f"Failed to create directory {node.full_path}: {e.strerror}", path=node.full_path
            ) from e
        log.debug("Created directory %s", node.full_path)

        for child in tree.children(node):
            generate(tree, child)
    else:
        try:
            with open(node.full_path, "xb"):
                pass
        except OSError as e:
            raise FilesystemError(
                f"Failed to create file {node.full_path}: {e.strerror}", path=node.full_path
            ) from e

        try:
            os.chmod(node.full_path, mode)
        except OSError as e:
            raise FilesystemError(
                f"Failed to set mode {mode:o} on {node.full_path}: {e.strerror}",
                path=node.full_path,
            ) from e
        log.debug("Created file %s", node.full_path)
