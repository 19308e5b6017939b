# services/todo_api/app/routers/tasks.py
from fastapi import APIRouter, HTTPException, Depends, Request, Response
from typing import List, Optional

from schemas.models import Task, TaskCreate, TaskUpdate, ErrorMessage
from ..storage.mongo_store import TaskStore

router = APIRouter(prefix="/tasks", tags=["tasks"])


def get_store(request: Request) -> TaskStore:
    return request.app.state.store


def _clean_text(text: Optional[str]) -> str:
    text = (text or "").strip()
    if not text:
        raise HTTPException(status_code=400, detail="text required")
    return text


@router.get("", response_model=List[Task])
def list_tasks(store: TaskStore = Depends(get_store)):
    return store.list_tasks()


@router.post(
    "",
    response_model=Task,
    status_code=201,
    responses={400: {"model": ErrorMessage}},
)
def create_task(req: Optional[TaskCreate] = None, store: TaskStore = Depends(get_store)):
    text = _clean_text(req.text if req else None)
    return store.create_task(text)


@router.patch(
    "/{task_id}",
    response_model=Task,
    responses={400: {"model": ErrorMessage}, 404: {"model": ErrorMessage}},
)
def update_task(task_id: str, req: Optional[TaskUpdate] = None, store: TaskStore = Depends(get_store)):
    """
    Partial update. Only `text` / `completed` present in the body change;
    `updatedAt` always advances. A supplied `text` must survive trimming.
    """
    changes = req.changes() if req else {}
    if "text" in changes:
        changes["text"] = _clean_text(changes["text"])

    updated = store.update_task(task_id, changes)
    if not updated:
        raise HTTPException(status_code=404, detail="not found")
    return updated


@router.delete("/{task_id}", status_code=204, responses={404: {"model": ErrorMessage}})
def delete_task(task_id: str, store: TaskStore = Depends(get_store)):
    if not store.delete_task(task_id):
        raise HTTPException(status_code=404, detail="not found")
    return Response(status_code=204)
