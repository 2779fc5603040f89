"""
Projection of a flat comment list onto reply trees.

Siblings keep the order of the flat list, so a reply appended to the cache
shows up as the last child of its parent. Comments whose parentId does not
resolve to a loaded comment are unreachable and left out, together with
everything that hangs below them.
"""
import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence

from pydantic import BaseModel, Field

from domain.comments import Comment

logger = logging.getLogger('uvicorn.error')


class CommentNode(BaseModel):
    comment: Comment
    replies: List["CommentNode"] = Field(default_factory=list)


def _children_by_parent(comments: Sequence[Comment]) -> Dict[Optional[int], List[Comment]]:
    children: Dict[Optional[int], List[Comment]] = defaultdict(list)
    for comment in comments:
        children[comment.parentId].append(comment)
    return children


def build_tree(comments: Iterable[Comment]) -> List[CommentNode]:
    """Build the reply forest of one entry's comments. The input is not modified."""
    comments = list(comments)
    children = _children_by_parent(comments)
    roots = [CommentNode(comment=comment) for comment in children.get(None, [])]
    seen = {node.comment.id for node in roots}
    # Explicit stack: reply chains may be deeper than the interpreter's recursion limit
    stack = list(roots)
    while stack:
        node = stack.pop()
        for child in children.get(node.comment.id, []):
            if child.id in seen:
                continue
            seen.add(child.id)
            child_node = CommentNode(comment=child)
            node.replies.append(child_node)
            stack.append(child_node)
    excluded = len(comments) - len(seen)
    if excluded:
        logger.debug(f"Excluded {excluded} unreachable comment(s) from thread")
    return roots


def flatten(forest: Iterable[CommentNode]) -> List[Comment]:
    """Pre-order list of every comment in the forest."""
    flat: List[Comment] = []
    stack = list(reversed(list(forest)))
    while stack:
        node = stack.pop()
        flat.append(node.comment)
        stack.extend(reversed(node.replies))
    return flat


def depth_of(comments: Iterable[Comment], comment_id: int) -> Optional[int]:
    """Depth of a comment within its thread: 0 for top-level, None if unknown or unreachable."""
    by_id = {comment.id: comment for comment in comments}
    depth = 0
    current = by_id.get(comment_id)
    visited = set()
    while current is not None:
        if current.parentId is None:
            return depth
        if current.id in visited:
            return None
        visited.add(current.id)
        current = by_id.get(current.parentId)
        depth += 1
    return None
