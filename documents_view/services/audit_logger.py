"""Document history (audit trail) writer."""

from enum import Enum
from typing import Dict, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from documents_view.database.models import DocumentAction
from documents_view.repositories.action_repository import ActionRepository
from documents_view.utils.logging import get_logger

LOGGER = get_logger(__name__)

# label -> (old display value, new display value)
ChangeSet = Dict[str, Sequence[Optional[str]]]


class DocumentActionType(str, Enum):
    VIEW = "view"
    EDIT = "edit"
    PROCESS = "process"
    UNPROCESS = "unprocess"
    TRASH = "trash"
    RESTORE = "restore"


ACTION_DESCRIPTIONS = {
    DocumentActionType.VIEW: "Document viewed",
    DocumentActionType.PROCESS: "Marked as processed",
    DocumentActionType.UNPROCESS: "Marked as unprocessed",
    DocumentActionType.TRASH: "Moved to trash",
    DocumentActionType.RESTORE: "Restored from trash",
}


def format_changes_description(changes: ChangeSet) -> str:
    """Render tracked changes as one human-readable sentence.

    Args:
        changes: Mapping of field label to (old, new) display values

    Returns:
        "<Label> changed from '<old>' to '<new>'" entries joined by ", ", or
        "Document updated" when nothing is listed
    """
    descriptions = []
    for label, values in changes.items():
        if len(values) != 2:
            continue
        old_value = values[0] if values[0] is not None else "(empty)"
        new_value = values[1] if values[1] is not None else "(empty)"
        descriptions.append(f"{label} changed from '{old_value}' to '{new_value}'")

    return ", ".join(descriptions) if descriptions else "Document updated"


class AuditLogger:
    """Appends DocumentAction rows inside the caller's transaction."""

    def __init__(self, session: AsyncSession):
        self.actions = ActionRepository(session)

    async def _record(
        self,
        document_id: int,
        user_id: Optional[int],
        action_type: DocumentActionType,
        description: str,
    ) -> DocumentAction:
        action = await self.actions.create(
            document_id=document_id,
            user_id=user_id,
            action_type=action_type.value,
            description=description,
        )
        LOGGER.info(
            "Document action recorded",
            extra={
                "document_id": document_id,
                "user_id": user_id,
                "action_type": action_type.value,
            },
        )
        return action

    async def log_view(self, document_id: int, user_id: Optional[int]) -> DocumentAction:
        return await self._record(
            document_id, user_id, DocumentActionType.VIEW, ACTION_DESCRIPTIONS[DocumentActionType.VIEW]
        )

    async def log_edit(
        self, document_id: int, user_id: Optional[int], changes: ChangeSet
    ) -> DocumentAction:
        return await self._record(
            document_id, user_id, DocumentActionType.EDIT, format_changes_description(changes)
        )

    async def log_process(self, document_id: int, user_id: Optional[int]) -> DocumentAction:
        return await self._record(
            document_id,
            user_id,
            DocumentActionType.PROCESS,
            ACTION_DESCRIPTIONS[DocumentActionType.PROCESS],
        )

    async def log_unprocess(self, document_id: int, user_id: Optional[int]) -> DocumentAction:
        return await self._record(
            document_id,
            user_id,
            DocumentActionType.UNPROCESS,
            ACTION_DESCRIPTIONS[DocumentActionType.UNPROCESS],
        )

    async def log_trash(self, document_id: int, user_id: Optional[int]) -> DocumentAction:
        return await self._record(
            document_id, user_id, DocumentActionType.TRASH, ACTION_DESCRIPTIONS[DocumentActionType.TRASH]
        )

    async def log_restore(self, document_id: int, user_id: Optional[int]) -> DocumentAction:
        return await self._record(
            document_id,
            user_id,
            DocumentActionType.RESTORE,
            ACTION_DESCRIPTIONS[DocumentActionType.RESTORE],
        )
