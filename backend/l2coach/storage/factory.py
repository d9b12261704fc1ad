"""
Conversation store wiring - builds the configured backend and holds the
process-wide instance used by the API layer.
"""

import logging
from typing import Optional

from .conversation_store import ConversationStore
from .file_store import FileConversationStore
from .interface import StorageInterface
from .local_storage import LocalStorage
from .memory_store import InMemoryConversationStore

logger = logging.getLogger(__name__)


def create_conversation_store(
    storage_type: str = "local",
    storage: Optional[StorageInterface] = None,
    local_storage_path: str = "./data",
) -> ConversationStore:
    """
    Create a conversation store for the configured deployment mode.

    Args:
        storage_type: "local" (file-backed) or "memory" (ephemeral)
        storage: Blob storage for the file-backed store; created from
            local_storage_path if omitted
        local_storage_path: Root directory when storage is not given

    Returns:
        ConversationStore instance
    """
    if storage_type == "memory":
        return InMemoryConversationStore()

    if storage_type == "local":
        if storage is None:
            storage = LocalStorage(local_storage_path)
        return FileConversationStore(storage)

    raise ValueError(f"Unsupported storage type: {storage_type}")


# Global conversation store instance
_conversation_store: Optional[ConversationStore] = None


def init_conversation_store(store: ConversationStore) -> None:
    """
    Install the global conversation store instance.

    Args:
        store: ConversationStore implementation
    """
    global _conversation_store
    _conversation_store = store
    logger.info(f"Conversation store initialized: {type(store).__name__}")


def get_conversation_store() -> ConversationStore:
    """
    Get the global conversation store instance.

    Raises:
        RuntimeError: If the store has not been initialized
    """
    if _conversation_store is None:
        raise RuntimeError("Conversation store not initialized. Call init_conversation_store() first.")
    return _conversation_store
