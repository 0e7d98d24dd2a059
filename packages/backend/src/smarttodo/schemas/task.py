"""Pydantic schemas for tasks.

Learn: Request schemas only check shapes and types. Field rules (title
required, allowed status/priority values, length limits) live in
TaskService so they apply to every write path and come back as a single
comma-joined validation message.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class TaskCreate(BaseModel):
    title: str
    description: str = ""
    status: str = "pending"
    priority: str = "medium"
    due_date: Optional[datetime] = None


class TaskUpdate(BaseModel):
    """Partial update — only fields present in the body are applied."""
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    due_date: Optional[datetime] = None


class TaskRead(BaseModel):
    id: uuid.UUID
    owner_id: uuid.UUID
    title: str
    description: str
    status: str
    priority: str
    due_date: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TaskEnvelope(BaseModel):
    success: bool = True
    data: TaskRead


class TaskListEnvelope(BaseModel):
    success: bool = True
    count: int
    data: list[TaskRead]
