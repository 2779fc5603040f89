"""
Unit tests for services.comment_tree.
"""
from services.comment_tree import build_tree, depth_of, flatten


def _ids(nodes):
    return [node.comment.id for node in nodes]


class TestBuildTree:
    """Tests for build_tree."""

    def test_roots_and_replies(self, comment_factory):
        comments = [
            comment_factory(1),
            comment_factory(2, parent_id=1),
            comment_factory(3),
            comment_factory(4, parent_id=2),
        ]

        roots = build_tree(comments)

        assert _ids(roots) == [1, 3]
        assert _ids(roots[0].replies) == [2]
        assert _ids(roots[0].replies[0].replies) == [4]
        assert roots[1].replies == []

    def test_siblings_keep_list_order(self, comment_factory):
        """Replies are not re-sorted by time; appended replies come last."""
        comments = [
            comment_factory(1),
            comment_factory(9, parent_id=1),
            comment_factory(2, parent_id=1),
            comment_factory(5, parent_id=1),
        ]

        roots = build_tree(comments)

        assert _ids(roots[0].replies) == [9, 2, 5]

    def test_orphans_and_their_replies_are_excluded(self, comment_factory):
        comments = [
            comment_factory(1),
            comment_factory(2, parent_id=1),
            comment_factory(3, parent_id=99),
            comment_factory(4, parent_id=3),
        ]

        flat = flatten(build_tree(comments))

        assert [comment.id for comment in flat] == [1, 2]

    def test_cycles_are_unreachable(self, comment_factory):
        comments = [
            comment_factory(1),
            comment_factory(10, parent_id=11),
            comment_factory(11, parent_id=10),
            comment_factory(12, parent_id=12),
        ]

        assert [comment.id for comment in flatten(build_tree(comments))] == [1]

    def test_flatten_contains_each_reachable_comment_once(self, thread_comments):
        entry_comments = [comment for comment in thread_comments if comment.postId == 42]

        flat = flatten(build_tree(entry_comments))

        assert sorted(comment.id for comment in flat) == [1, 2, 3, 5, 6, 7]
        assert len(flat) == len({comment.id for comment in flat})
        # Pre-order: a parent precedes all of its replies
        assert [comment.id for comment in flat] == [1, 3, 5, 6, 2, 7]

    def test_idempotent(self, thread_comments):
        entry_comments = [comment for comment in thread_comments if comment.postId == 42]

        first = build_tree(entry_comments)
        second = build_tree(flatten(first))

        assert second == first

    def test_input_not_modified(self, thread_comments):
        before = [comment.model_dump() for comment in thread_comments]

        build_tree(thread_comments)
        build_tree(thread_comments)

        assert [comment.model_dump() for comment in thread_comments] == before

    def test_empty_list(self):
        assert build_tree([]) == []
        assert flatten([]) == []


class TestDepthOf:
    """Tests for depth_of."""

    def test_depths(self, thread_comments):
        assert depth_of(thread_comments, 1) == 0
        assert depth_of(thread_comments, 3) == 1
        assert depth_of(thread_comments, 5) == 2

    def test_unknown_and_orphaned(self, comment_factory):
        comments = [comment_factory(1), comment_factory(2, parent_id=50)]

        assert depth_of(comments, 404) is None
        assert depth_of(comments, 2) is None

    def test_cycle(self, comment_factory):
        comments = [comment_factory(10, parent_id=11), comment_factory(11, parent_id=10)]

        assert depth_of(comments, 10) is None


class TestDeepChains:
    """Reply chains deeper than the interpreter's recursion limit."""

    def test_build_and_flatten_long_chain(self, comment_factory):
        chain = [comment_factory(1)] + [
            comment_factory(comment_id, parent_id=comment_id - 1) for comment_id in range(2, 2001)
        ]

        roots = build_tree(chain)
        flat = flatten(roots)

        assert [comment.id for comment in flat] == list(range(1, 2001))
        assert [comment.id for comment in flatten(build_tree(flat))] == list(range(1, 2001))
        assert depth_of(chain, 2000) == 1999
