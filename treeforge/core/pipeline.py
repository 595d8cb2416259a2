import logging
from typing import Union

from treeforge.core.builder import build_from_layout
from treeforge.core.checksum import build_hashes
from treeforge.core.content import write_content
from treeforge.core.materialize import generate
from treeforge.core.models.input import DirectoryInput, FileInput, Layout
from treeforge.core.models.tree import Node, Tree
from treeforge.core.permissions import set_perms

log = logging.getLogger(__name__)


def _collect_contents(tree: Tree, layout: Layout) -> list[tuple[Node, bytes]]:
    """Pair every planned file node with the content declared for it in the layout."""
    contents = []

    def visit(parent: Node, children: list[Union[DirectoryInput, FileInput]]) -> None:
        # build_from_layout plans children in declaration order, so they line up
        for node, child in zip(tree.children(parent), children):
            if isinstance(child, DirectoryInput):
                visit(node, child.children)
            elif child.content is not None:
                contents.append((node, child.content.encode("utf-8")))

    visit(tree.root, layout.children)
    return contents


def deploy_layout(layout: Layout) -> Tree:
    """Plan a layout and deploy it under the current working directory.

    Runs every stage in order: generate, write contents, hash, set permissions.
    The first failing stage stops the deployment, nothing is rolled back.
    """
    tree = build_from_layout(layout)
    log.info("Deploying %s (%d nodes)", tree.root.full_path, len(tree))

    generate(tree)

    contents = _collect_contents(tree, layout)
    for node, content in contents:
        write_content(node, content)
    log.debug("Wrote content of %d/%d file(s)", len(contents), layout.file_count)

    build_hashes(tree)
    set_perms(tree)

    log.info("Deployed %s", tree.root.full_path)
    return tree
