"""Core module - conversation engine, session registry and reply resolution."""

from .exceptions import (
    CoachError, ValidationError, NotFoundError, SessionNotFoundError,
    MessageNotFoundError, SessionBusyError, StorageError, UploadError,
    AnalysisError, UnknownScenarioError
)
from .engine import ConversationEngine, ConversationState, init_engine, get_engine
from .registry import SessionRegistry, init_registry, get_registry
from .resolver import ResponseResolver, ResolveRequest, Reply

__all__ = [
    'CoachError', 'ValidationError', 'NotFoundError', 'SessionNotFoundError',
    'MessageNotFoundError', 'SessionBusyError', 'StorageError', 'UploadError',
    'AnalysisError', 'UnknownScenarioError',
    'ConversationEngine', 'ConversationState', 'init_engine', 'get_engine',
    'SessionRegistry', 'init_registry', 'get_registry',
    'ResponseResolver', 'ResolveRequest', 'Reply',
]
