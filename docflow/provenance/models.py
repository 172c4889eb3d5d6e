from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ActivityAction(str, Enum):
    UPLOADED = "uploaded"
    DOWNLOADED = "downloaded"
    VIEWED = "viewed"
    SHARED = "shared"
    TAGGED = "tagged"
    STARRED = "starred"
    LINKED = "linked"


@dataclass(frozen=True)
class ActivityEvent:
    """Represents a row from the document_activity table."""

    document_id: str
    workspace_id: str
    user_id: str
    action: ActivityAction
    user_name: str | None = None
    details: dict[str, Any] = field(default_factory=dict)
    id: int | None = None
    created_at: datetime | None = None
