import os
from pathlib import Path
from typing import Iterator

import pytest

from treeforge.core.builder import build_node, build_root
from treeforge.core.config import reset_config
from treeforge.core.models.tree import NodeKind, Tree


@pytest.fixture(autouse=True)
def default_config() -> Iterator[None]:
    """Make every test start from (and leave behind) the default configuration."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def tmp_cwd(tmp_path: Path) -> Iterator[Path]:
    """Temporarily change working directory to a pytest tmpdir."""
    cwd = Path.cwd()
    os.chdir(tmp_path)
    try:
        yield tmp_path
    finally:
        os.chdir(cwd)


@pytest.fixture
def build_tree(tmp_cwd: Path) -> Tree:
    """Return the plan of the classic example, rooted in tmp_cwd.

    build/
    ├── content/
    │   └── content2.txt (0444)
    └── content1.txt (0444)
    """
    tree = build_root("build", 0o777)
    content = build_node(tree, tree.root, "content", 0o777, NodeKind.DIRECTORY)
    build_node(tree, tree.root, "content1.txt", 0o444, NodeKind.FILE)
    build_node(tree, content, "content2.txt", 0o444, NodeKind.FILE)
    return tree
