# stockforum/domain/comment_tree.py
from typing import Dict, List, Optional, Sequence

from stockforum.domain.models import CommentDTO

# ----------------------------
# Comment Tree
# ----------------------------


def _has_cycle(comment_id: int, parents: Dict[int, Optional[int]]) -> bool:
    """True when following parent links from comment_id comes back to it."""
    seen = {comment_id}
    current = parents.get(comment_id)
    while current is not None and current in parents:
        if current in seen:
            return current == comment_id
        seen.add(current)
        current = parents[current]
    return False


def build_comment_tree(comments: Sequence[CommentDTO]) -> List[CommentDTO]:
    """
    Nest a flat list of one stock's comments by parent_comment_id.

    Top-level comments come back newest first, replies at every level
    oldest first. A reply whose parent is missing (deleted) is promoted to
    the top level, as is any comment whose parent chain loops back on
    itself, so every input comment appears exactly once in the result.
    """
    by_id: Dict[int, CommentDTO] = {}
    for c in comments:
        by_id[c.id] = c.model_copy(update={"replies": []})

    parents = {cid: c.parent_comment_id for cid, c in by_id.items()}

    tree: List[CommentDTO] = []
    for cid, node in by_id.items():
        parent = by_id.get(node.parent_comment_id) if node.parent_comment_id is not None else None
        if parent is None or parent.id == cid or _has_cycle(cid, parents):
            tree.append(node)
        else:
            parent.replies.append(node)

    for node in by_id.values():
        node.replies.sort(key=lambda r: (r.created_at, r.id))
    tree.sort(key=lambda c: (c.created_at, c.id), reverse=True)
    return tree


def count_nodes(tree: Sequence[CommentDTO]) -> int:
    return sum(1 + count_nodes(node.replies) for node in tree)
