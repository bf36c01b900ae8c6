"""Routes addressing a comment directly (edit and delete)."""

from fastapi import APIRouter, Depends, Response, status

from executask.api.dependencies import get_comment_service
from executask.auth.dependencies import get_current_user
from executask.models.comment import Comment, CommentPayload
from executask.models.user import User
from executask.services.comment_service import CommentService

router = APIRouter(prefix="/comments", tags=["comments"])


@router.patch("/{comment_id}", response_model=Comment)
def update_comment(
    comment_id: str,
    payload: CommentPayload,
    current_user: User = Depends(get_current_user),
    service: CommentService = Depends(get_comment_service),
):
    return service.update_comment(current_user.id, comment_id, payload)


@router.delete("/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_comment(
    comment_id: str,
    current_user: User = Depends(get_current_user),
    service: CommentService = Depends(get_comment_service),
):
    service.delete_comment(current_user.id, comment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
