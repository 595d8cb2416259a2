from pathlib import Path
from typing import Literal, Optional

import pydantic

from treeforge.core.models.tree import Tree


class ManifestEntry(pydantic.BaseModel):
    """A deployed directory or file, with its digests for files."""

    path: Path
    type: Literal["directory", "file"]
    mode: str
    sha1: Optional[str] = None
    sha256: Optional[str] = None

    @pydantic.field_validator("path")
    def _path_is_relative(cls, path: Path) -> Path:
        if path.is_absolute():
            raise ValueError(f"path must be relative to the root: {path}")
        return path


class Manifest(pydantic.BaseModel):
    """Everything a deployment created, relative to the root directory.

    The entries come in the order the tree was planned (pre-order), the root itself is
    the first entry with path ".".
    """

    root: Path
    entries: list[ManifestEntry] = []

    @classmethod
    def from_tree(cls, tree: Tree) -> "Manifest":
        root_path = tree.root.full_path
        entries = []
        for node, _ in tree.walk():
            digests = dict(node.checksums())
            entries.append(
                ManifestEntry(
                    path=node.full_path.relative_to(root_path),
                    type=node.kind.value,
                    mode=f"{node.permission:04o}",
                    sha1=digests.get("sha1"),
                    sha256=digests.get("sha256"),
                )
            )
        return cls(root=root_path, entries=entries)
