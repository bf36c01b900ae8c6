"""FastAPI dependencies wiring request-scoped services."""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from executask.context import AppContext
from executask.database.database import get_db
from executask.services.category_service import CategoryService
from executask.services.comment_service import CommentService
from executask.services.todo_service import TodoService


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def get_todo_service(
    db: Session = Depends(get_db),
    context: AppContext = Depends(get_context),
) -> TodoService:
    return TodoService(db, context.object_store)


def get_category_service(db: Session = Depends(get_db)) -> CategoryService:
    return CategoryService(db)


def get_comment_service(db: Session = Depends(get_db)) -> CommentService:
    return CommentService(db)
