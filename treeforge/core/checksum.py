import asyncio
import hashlib
import logging
from os import PathLike
from typing import TYPE_CHECKING, NamedTuple, Optional, Union

from treeforge.core.config import get_config
from treeforge.core.errors import FilesystemError

if TYPE_CHECKING:
    from treeforge.core.models.tree import Node, Tree

log = logging.getLogger(__name__)

# every file gets one digest per algorithm, in this order
DIGEST_ALGORITHMS = ("sha1", "sha256")


class ChecksumInfo(NamedTuple):
    """A cryptographic algorithm and a hex-encoded checksum calculated by that algorithm."""

    algorithm: str
    hexdigest: str


def _get_digest(file_path: Union[str, PathLike[str]], algorithm: str, chunk_size: int) -> bytes:
    try:
        with open(file_path, "rb") as f:
            hasher = hashlib.new(algorithm)
            while chunk := f.read(chunk_size):
                hasher.update(chunk)
            return hasher.digest()
    except OSError as e:
        raise FilesystemError(
            f"Failed to read {file_path} for its {algorithm} digest: {e.strerror}",
            path=file_path,
        ) from e


async def _hash_file(node: "Node", chunk_size: int) -> None:
    """Compute both digests of a file concurrently, each task reading the file on its own.

    Both digests are stored only if both tasks succeed. If both fail, the first error
    (in DIGEST_ALGORITHMS order) is raised and the other one is logged at DEBUG level.
    """
    results = await asyncio.gather(
        *(
            asyncio.to_thread(_get_digest, node.full_path, algorithm, chunk_size)
            for algorithm in DIGEST_ALGORITHMS
        ),
        return_exceptions=True,
    )

    errors = [result for result in results if isinstance(result, BaseException)]
    if errors:
        for other_error in errors[1:]:
            log.debug("%s: another digest task failed too: %s", node.full_path, other_error)
        raise errors[0]

    digests = [result for result in results if isinstance(result, bytes)]
    node.sha1, node.sha256 = digests
    log.debug("%s: sha1 %s, sha256 %s", node.full_path, node.sha1.hex(), node.sha256.hex())


async def async_build_hashes(tree: "Tree", node: Optional["Node"] = None) -> None:
    """Compute the SHA-1 and SHA-256 digests of every file under node (default: root).

    Files are processed one after another, depth first. The two digests of a single file
    are computed concurrently.

    :raises FilesystemError: for the first file that could not be read, files after it
        are not hashed
    """
    chunk_size = get_config().hash_chunk_size
    files = tree.files(node)

    for file_node in files:
        await _hash_file(file_node, chunk_size)

    log.debug("Computed digests of %d file(s)", len(files))


def build_hashes(tree: "Tree", node: Optional["Node"] = None) -> None:
    """Compute file digests, see async_build_hashes. Blocks until all files are done."""
    asyncio.run(async_build_hashes(tree, node))
