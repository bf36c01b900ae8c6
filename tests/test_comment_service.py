"""Tests for CommentService."""

import pytest

from executask.errors import NotFoundError
from executask.models.comment import CommentPayload


class TestCommentService:
    """Test comments on todos."""

    def test_add_and_list_comments(self, comment_service, test_user_id, make_todo):
        todo = make_todo()

        comment_service.add_comment(test_user_id, todo.id, CommentPayload(content="First"))
        comment_service.add_comment(test_user_id, todo.id, CommentPayload(content="  Second  "))

        comments = comment_service.list_comments(test_user_id, todo.id)
        assert [c.content for c in comments] == ["First", "Second"]

    def test_cannot_comment_on_other_users_todo(self, comment_service, other_user_id, make_todo):
        todo = make_todo()
        with pytest.raises(NotFoundError):
            comment_service.add_comment(other_user_id, todo.id, CommentPayload(content="Hi"))

    def test_cannot_list_comments_on_other_users_todo(self, comment_service, other_user_id, make_todo):
        todo = make_todo()
        with pytest.raises(NotFoundError):
            comment_service.list_comments(other_user_id, todo.id)

    def test_update_comment(self, comment_service, test_user_id, make_todo):
        todo = make_todo()
        comment = comment_service.add_comment(test_user_id, todo.id, CommentPayload(content="Draft"))

        updated = comment_service.update_comment(test_user_id, comment.id, CommentPayload(content="Final"))

        assert updated.content == "Final"
        assert updated.todo_id == todo.id

    def test_update_other_users_comment_is_not_found(self, comment_service, test_user_id, other_user_id, make_todo):
        todo = make_todo()
        comment = comment_service.add_comment(test_user_id, todo.id, CommentPayload(content="Mine"))
        with pytest.raises(NotFoundError) as exc_info:
            comment_service.update_comment(other_user_id, comment.id, CommentPayload(content="Theirs"))
        assert exc_info.value.code == "COMMENT_NOT_FOUND"

    def test_delete_comment(self, comment_service, test_user_id, make_todo):
        todo = make_todo()
        comment = comment_service.add_comment(test_user_id, todo.id, CommentPayload(content="Bye"))

        comment_service.delete_comment(test_user_id, comment.id)

        assert comment_service.list_comments(test_user_id, todo.id) == []
