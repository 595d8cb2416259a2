from enum import Enum
from pathlib import Path
from typing import Iterator, Optional

import pydantic

from treeforge.core.checksum import ChecksumInfo
from treeforge.core.errors import InvalidInput
from treeforge.core.models.input import Permission

NodeId = int


class NodeKind(str, Enum):
    """What a planned node turns into on disk."""

    DIRECTORY = "directory"
    FILE = "file"


class Node(pydantic.BaseModel, validate_assignment=True):
    """A planned directory or file.

    Nodes live in a Tree, which owns them. Children are referenced by their id in that
    tree, the parent id is kept for upward navigation only.
    """

    id: NodeId = pydantic.Field(frozen=True)
    name: str = pydantic.Field(frozen=True)
    kind: NodeKind = pydantic.Field(frozen=True)
    permission: Permission
    parent_path: Path = pydantic.Field(frozen=True)
    full_path: Path = pydantic.Field(frozen=True)
    parent: Optional[NodeId] = None
    children: list[NodeId] = []

    # set by build_hashes, for files only
    sha1: Optional[bytes] = None
    sha256: Optional[bytes] = None

    @property
    def is_dir(self) -> bool:
        return self.kind == NodeKind.DIRECTORY

    @property
    def is_root(self) -> bool:
        return self.parent is None

    def checksums(self) -> list[ChecksumInfo]:
        """Return the computed digests as hex ChecksumInfo, empty if not hashed yet."""
        digests = [("sha1", self.sha1), ("sha256", self.sha256)]
        return [ChecksumInfo(alg, digest.hex()) for alg, digest in digests if digest is not None]


class Tree:
    """An arena of planned nodes, the first one being the root directory.

    >>> tree = Tree.with_root("build", 0o755, parent_path=Path("/tmp"))
    >>> tree.add_node(tree.root, "README", 0o644, NodeKind.FILE).full_path
    PosixPath('/tmp/build/README')
    """

    def __init__(self, root: Node) -> None:
        if root.id != 0 or not root.is_dir:
            raise InvalidInput("the root of a tree must be a directory node with id 0")
        self._nodes: list[Node] = [root]

    @classmethod
    def with_root(cls, name: str, permission: int, parent_path: Path) -> "Tree":
        """Create a tree holding a single root directory inside parent_path."""
        root = Node(
            id=0,
            name=name,
            kind=NodeKind.DIRECTORY,
            permission=permission,
            parent_path=parent_path,
            full_path=parent_path / name,
        )
        return cls(root)

    @property
    def root(self) -> Node:
        return self._nodes[0]

    def __len__(self) -> int:
        return len(self._nodes)

    def __getitem__(self, node_id: NodeId) -> Node:
        return self._nodes[node_id]

    def __iter__(self) -> Iterator[Node]:
        return (node for node, _ in self.walk())

    def add_node(self, parent: Node, name: str, permission: int, kind: NodeKind) -> Node:
        """Create a node under parent and append it to the parent's children."""
        if parent.id >= len(self._nodes) or self._nodes[parent.id] is not parent:
            raise InvalidInput(f"{parent.full_path} does not belong to this tree")
        if not parent.is_dir:
            raise InvalidInput(
                f"Cannot add {name!r} under {parent.full_path}: it is a file, not a directory"
            )

        node = Node(
            id=len(self._nodes),
            name=name,
            kind=kind,
            permission=permission,
            parent_path=parent.full_path,
            full_path=parent.full_path / name,
            parent=parent.id,
        )
        self._nodes.append(node)
        parent.children.append(node.id)
        return node

    def children(self, node: Node) -> list[Node]:
        return [self._nodes[child_id] for child_id in node.children]

    def parent(self, node: Node) -> Optional[Node]:
        if node.parent is None:
            return None
        return self._nodes[node.parent]

    def walk(self, node: Optional[Node] = None, depth: int = 0) -> Iterator[tuple[Node, int]]:
        """Yield (node, depth) pairs in pre-order, siblings in the order they were added."""
        if node is None:
            node = self.root
        yield node, depth
        for child in self.children(node):
            yield from self.walk(child, depth + 1)

    def files(self, node: Optional[Node] = None) -> list[Node]:
        return [n for n, _ in self.walk(node) if not n.is_dir]
