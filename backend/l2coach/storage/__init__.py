"""Storage module - blob storage plus the conversation persistence gateway."""

from .interface import StorageInterface
from .local_storage import LocalStorage
from .conversation_store import ConversationStore
from .file_store import FileConversationStore
from .memory_store import InMemoryConversationStore
from .factory import create_conversation_store, init_conversation_store, get_conversation_store

__all__ = [
    'StorageInterface', 'LocalStorage',
    'ConversationStore', 'FileConversationStore', 'InMemoryConversationStore',
    'create_conversation_store', 'init_conversation_store', 'get_conversation_store'
]
