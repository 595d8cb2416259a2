import stat
from typing import Optional

from treeforge.core.config import get_config
from treeforge.core.models.tree import Node, Tree


def format_mode(node: Node) -> str:
    """Format the planned permission like `ls -l` does, e.g. "drwxr-xr-x"."""
    file_type = stat.S_IFDIR if node.is_dir else stat.S_IFREG
    return stat.filemode(file_type | node.permission)


def render_node(node: Node, depth: int = 0, *, show_digests: bool = True) -> str:
    """Render a single node as an aligned block of "label value" rows.

    Every row is prefixed by the render_marker repeated depth times. Digest rows are
    only rendered for files, and are empty until build_hashes() ran.
    """
    conf = get_config()
    prefix = conf.render_marker * depth

    rows = [
        ("Name:", node.name),
        ("Is Directory:", str(node.is_dir)),
        ("Permissions:", format_mode(node)),
        ("Directory:", str(node.parent_path)),
        ("Full path:", str(node.full_path)),
    ]
    if show_digests and not node.is_dir:
        digests = dict(node.checksums())
        rows.append(("SHA1:", digests.get("sha1", "")))
        rows.append(("SHA256:", digests.get("sha256", "")))

    width = max(len(label) for label, _ in rows) + conf.render_padding
    return "".join(f"{prefix}{label:<{width}}{value}\n" for label, value in rows)


def render_tree(tree: Tree, node: Optional[Node] = None, *, show_digests: bool = True) -> str:
    """Render node (default: root) and everything below it, one block per node.

    Nodes come in pre-order and siblings in the order they were planned, so files and
    directories are not grouped or sorted.
    """
    return "".join(
        render_node(n, depth, show_digests=show_digests) for n, depth in tree.walk(node)
    )
