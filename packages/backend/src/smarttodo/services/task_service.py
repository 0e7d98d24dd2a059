"""Task service — store operations on tasks.

Learn: The service owns field validation (the rules a document store
would enforce on save) and answers with result variants. Ownership is
not checked here: the ownership gate loads the task, compares owners,
and hands the loaded row to update_task/delete_task so the handler does
not look it up a second time.
"""

import uuid
from datetime import datetime
from typing import Any, Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from smarttodo.db.models import TASK_PRIORITIES, TASK_STATUSES, Task
from smarttodo.services.results import (
    Absent,
    Found,
    Invalid,
    StoreResult,
    parse_id,
    store_call,
)

TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500

UPDATABLE_FIELDS = ("title", "description", "status", "priority", "due_date")


def validate_task_fields(fields: dict[str, Any]) -> list[str]:
    """Check only the fields present; returns one message per problem."""
    messages = []
    if "title" in fields:
        title = fields["title"]
        if title is None or not title.strip():
            messages.append("Please provide a task title")
        elif len(title.strip()) > TITLE_MAX_LENGTH:
            messages.append(f"Title cannot be more than {TITLE_MAX_LENGTH} characters")
    if "description" in fields:
        if len(fields["description"] or "") > DESCRIPTION_MAX_LENGTH:
            messages.append(
                f"Description cannot be more than {DESCRIPTION_MAX_LENGTH} characters"
            )
    if "status" in fields and fields["status"] not in TASK_STATUSES:
        messages.append(f"Status must be one of: {', '.join(TASK_STATUSES)}")
    if "priority" in fields and fields["priority"] not in TASK_PRIORITIES:
        messages.append(f"Priority must be one of: {', '.join(TASK_PRIORITIES)}")
    return messages


class TaskService:
    """Business logic for task CRUD."""

    def __init__(self, db: AsyncSession, timeout: float = 5.0):
        self.db = db
        self.timeout = timeout

    # ─── Read ────────────────────────────────────────────

    async def find_task_by_id(self, task_id: Union[str, uuid.UUID]) -> Union[Found[Task], Absent]:
        parsed = parse_id(task_id)
        if parsed is None:
            return Absent(malformed=True)

        async with store_call(self.timeout):
            task = await self.db.get(Task, parsed)
        return Found(task) if task else Absent()

    async def list_tasks(
        self,
        owner_id: uuid.UUID,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Task]:
        """List an owner's tasks, newest first."""
        q = select(Task).where(Task.owner_id == owner_id)
        if status:
            q = q.where(Task.status == status)
        if priority:
            q = q.where(Task.priority == priority)
        q = q.order_by(Task.created_at.desc()).limit(limit).offset(offset)

        async with store_call(self.timeout):
            result = await self.db.execute(q)
        return list(result.scalars().all())

    # ─── Write ───────────────────────────────────────────

    async def create_task(
        self,
        owner_id: uuid.UUID,
        title: str,
        description: str = "",
        status: str = "pending",
        priority: str = "medium",
        due_date: Optional[datetime] = None,
    ) -> StoreResult[Task]:
        messages = validate_task_fields(
            {"title": title, "description": description, "status": status, "priority": priority}
        )
        if messages:
            return Invalid(messages)

        task = Task(
            owner_id=owner_id,
            title=title.strip(),
            description=description or "",
            status=status,
            priority=priority,
            due_date=due_date,
        )
        self.db.add(task)
        async with store_call(self.timeout):
            await self.db.commit()
        return Found(task)

    async def update_task(self, task: Task, changes: dict[str, Any]) -> StoreResult[Task]:
        """Apply a partial update. owner_id is never writable."""
        changes = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS}
        messages = validate_task_fields(changes)
        if messages:
            return Invalid(messages)

        for key, value in changes.items():
            if key == "title":
                value = value.strip()
            elif key == "description":
                value = value or ""
            setattr(task, key, value)

        async with store_call(self.timeout):
            await self.db.commit()
            await self.db.refresh(task)
        return Found(task)

    async def delete_task(self, task: Task) -> Found[uuid.UUID]:
        task_id = task.id
        async with store_call(self.timeout):
            await self.db.delete(task)
            await self.db.commit()
        return Found(task_id)
