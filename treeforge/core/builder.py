import logging
import os
from pathlib import Path
from typing import Union

from treeforge.core.config import get_config
from treeforge.core.errors import InvalidInput, WorkingDirectoryError
from treeforge.core.models.input import DirectoryInput, FileInput, Layout
from treeforge.core.models.tree import Node, NodeKind, Tree
from treeforge.core.models.validators import check_node_name, parse_permission

log = logging.getLogger(__name__)


def _checked_name(name: str) -> str:
    try:
        return check_node_name(name)
    except ValueError as e:
        raise InvalidInput(f"Invalid node name: {e}") from e


def _checked_permission(permission: int) -> int:
    try:
        return parse_permission(permission)
    except ValueError as e:
        raise InvalidInput(f"Invalid permission: {e}") from e


def build_root(name: str, permission: int) -> Tree:
    """Plan a root directory called name inside the current working directory.

    :raises WorkingDirectoryError: if the current working directory cannot be resolved
    :raises InvalidInput: if name is not a single path segment or permission is out of range
    """
    name = _checked_name(name)
    permission = _checked_permission(permission)
    try:
        cwd = os.getcwd()
    except OSError as e:
        raise WorkingDirectoryError(f"Cannot resolve the current working directory: {e}") from e

    tree = Tree.with_root(name, permission, parent_path=Path(cwd))
    log.debug("Planned root directory %s", tree.root.full_path)
    return tree


def build_node(tree: Tree, parent: Node, name: str, permission: int, kind: NodeKind) -> Node:
    """Plan a directory or file under parent.

    The new node is appended to parent.children. Sibling names are not required to be
    unique unless the allow_duplicate_names config option is turned off, in which case
    the duplicate is rejected here instead of failing later in generate().

    :raises InvalidInput: if name or permission is invalid, parent is a file or the name is taken
    """
    name = _checked_name(name)
    permission = _checked_permission(permission)
    if not get_config().allow_duplicate_names:
        if any(sibling.name == name for sibling in tree.children(parent)):
            raise InvalidInput(
                f"{parent.full_path} already has a child called {name!r}",
                solution=(
                    "Please give every child of a directory a distinct name, or set "
                    "allow_duplicate_names to true in the config file."
                ),
            )

    node = tree.add_node(parent, name, permission, NodeKind(kind))
    log.debug("Planned %s %s (mode %o)", node.kind.value, node.full_path, permission)
    return node


def build_from_layout(layout: Layout) -> Tree:
    """Plan a whole tree from a validated layout, in declaration order."""
    tree = build_root(layout.name, layout.permission)

    def add_children(parent: Node, children: list[Union[DirectoryInput, FileInput]]) -> None:
        for child in children:
            if isinstance(child, DirectoryInput):
                node = build_node(tree, parent, child.name, child.permission, NodeKind.DIRECTORY)
                add_children(node, child.children)
            else:
                build_node(tree, parent, child.name, child.permission, NodeKind.FILE)

    add_children(tree.root, layout.children)
    return tree
