import logging
import os
from typing import Optional

from treeforge.core.config import get_config
from treeforge.core.errors import FilesystemError
from treeforge.core.models.tree import Node, Tree

log = logging.getLogger(__name__)


def _chmod(node: Node) -> None:
    try:
        os.chmod(node.full_path, node.permission)
    except OSError as e:
        raise FilesystemError(
            f"Failed to set mode {node.permission:o} on {node.full_path}: {e.strerror}",
            path=node.full_path,
        ) from e
    log.debug("Set mode %o on %s", node.permission, node.full_path)


def _set_children_perms(tree: Tree, node: Node) -> None:
    for child in tree.children(node):
        _chmod(child)
        _set_children_perms(tree, child)


def set_perms(tree: Tree, node: Optional[Node] = None) -> None:
    """Apply the planned permissions below node (default: root), stopping at the first failure.

    Each child is chmod-ed before its own children are visited. The starting node keeps
    the mode it got from generate(), unless finalize_root_permission is enabled, in which
    case it is chmod-ed last (so that a read-only directory does not lock out its children).

    :raises FilesystemError: if a chmod fails
    """
    if node is None:
        node = tree.root

    _set_children_perms(tree, node)

    if get_config().finalize_root_permission:
        _chmod(node)
