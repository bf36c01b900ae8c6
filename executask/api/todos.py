"""Todo, attachment and todo-comment routes."""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile, status

from executask.api.dependencies import get_comment_service, get_todo_service
from executask.auth.dependencies import get_current_user
from executask.models.attachment import Attachment, AttachmentDownload
from executask.models.base import Page
from executask.models.comment import Comment, CommentPayload
from executask.models.constants import DEFAULT_PAGE_SIZE, MAX_ATTACHMENT_SIZE
from executask.models.todo import (
    CreateTodoPayload,
    PopulatedTodo,
    Todo,
    TodoListQuery,
    TodoStats,
    UpdateTodoPayload,
)
from executask.models.user import User
from executask.services.comment_service import CommentService
from executask.services.todo_service import TodoService

router = APIRouter(prefix="/todos", tags=["todos"])


@router.post("", response_model=Todo, status_code=status.HTTP_201_CREATED)
def create_todo(
    payload: CreateTodoPayload,
    current_user: User = Depends(get_current_user),
    service: TodoService = Depends(get_todo_service),
):
    """Create a todo (optionally as a subtask or in a category)."""
    return service.create_todo(current_user.id, payload)


@router.get("", response_model=Page[Todo])
def list_todos(
    page: int = Query(1),
    limit: int = Query(DEFAULT_PAGE_SIZE),
    status_filter: Optional[str] = Query(None, alias="status"),
    priority: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    category_id: Optional[str] = Query(None, alias="categoryId"),
    parent_todo_id: Optional[str] = Query(None, alias="parentTodoId"),
    due_from: Optional[str] = Query(None, alias="dueFrom"),
    due_to: Optional[str] = Query(None, alias="dueTo"),
    overdue: Optional[bool] = Query(None),
    sort: Optional[str] = Query(None),
    order: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    service: TodoService = Depends(get_todo_service),
):
    """List the current user's todos with filters, ordering and pagination."""
    params = {
        "page": page,
        "limit": limit,
        "status": status_filter,
        "priority": priority,
        "search": search,
        "categoryId": category_id,
        "parentTodoId": parent_todo_id,
        "dueFrom": due_from,
        "dueTo": due_to,
        "overdue": overdue,
        "sort": sort,
        "order": order,
    }
    # Unset parameters fall back to the model defaults.
    query = TodoListQuery.model_validate({k: v for k, v in params.items() if v is not None})
    return service.list_todos(current_user.id, query)


@router.get("/stats", response_model=TodoStats)
def get_stats(
    current_user: User = Depends(get_current_user),
    service: TodoService = Depends(get_todo_service),
):
    return service.get_stats(current_user.id)


@router.get("/{todo_id}", response_model=PopulatedTodo)
def get_todo(
    todo_id: str,
    current_user: User = Depends(get_current_user),
    service: TodoService = Depends(get_todo_service),
):
    """Get a todo with its category, subtasks, comments and attachments."""
    return service.get_todo(current_user.id, todo_id)


@router.patch("/{todo_id}", response_model=Todo)
def update_todo(
    todo_id: str,
    payload: UpdateTodoPayload,
    current_user: User = Depends(get_current_user),
    service: TodoService = Depends(get_todo_service),
):
    """Partially update a todo. Fields absent from the body are left unchanged."""
    return service.update_todo(current_user.id, todo_id, payload)


@router.delete("/{todo_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_todo(
    todo_id: str,
    current_user: User = Depends(get_current_user),
    service: TodoService = Depends(get_todo_service),
):
    """Delete a todo together with its subtasks, comments and attachments."""
    service.delete_todo(current_user.id, todo_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{todo_id}/attachments", response_model=Attachment, status_code=status.HTTP_201_CREATED)
def upload_attachment(
    todo_id: str,
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    service: TodoService = Depends(get_todo_service),
):
    # One byte past the limit is enough for the size check to reject the file.
    data = file.file.read(MAX_ATTACHMENT_SIZE + 1)
    return service.upload_attachment(
        current_user.id,
        todo_id,
        filename=file.filename or "file",
        content_type=file.content_type or "application/octet-stream",
        data=data,
    )


@router.get("/{todo_id}/attachments", response_model=List[Attachment])
def list_attachments(
    todo_id: str,
    current_user: User = Depends(get_current_user),
    service: TodoService = Depends(get_todo_service),
):
    return service.list_attachments(current_user.id, todo_id)


@router.get("/{todo_id}/attachments/{attachment_id}/download", response_model=AttachmentDownload)
def download_attachment(
    todo_id: str,
    attachment_id: str,
    current_user: User = Depends(get_current_user),
    service: TodoService = Depends(get_todo_service),
):
    """Return a time-limited download URL for an attachment."""
    return service.get_attachment_download_url(current_user.id, todo_id, attachment_id)


@router.delete("/{todo_id}/attachments/{attachment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_attachment(
    todo_id: str,
    attachment_id: str,
    current_user: User = Depends(get_current_user),
    service: TodoService = Depends(get_todo_service),
):
    service.delete_attachment(current_user.id, todo_id, attachment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{todo_id}/comments", response_model=Comment, status_code=status.HTTP_201_CREATED)
def add_comment(
    todo_id: str,
    payload: CommentPayload,
    current_user: User = Depends(get_current_user),
    service: CommentService = Depends(get_comment_service),
):
    return service.add_comment(current_user.id, todo_id, payload)


@router.get("/{todo_id}/comments", response_model=List[Comment])
def list_comments(
    todo_id: str,
    current_user: User = Depends(get_current_user),
    service: CommentService = Depends(get_comment_service),
):
    return service.list_comments(current_user.id, todo_id)
