"""Models module."""

from .base import CoachModel
from .session import Session, SessionCreate, SessionUpdate, ActiveSessionUpdate
from .message import Role, MessageType, Mode, MessageCreate, Message
from .scenario import Scenario
from .turn import TextTurnRequest, ScenarioTurnRequest, AnalyzeRequest, Turn

__all__ = [
    'CoachModel',
    'Session', 'SessionCreate', 'SessionUpdate', 'ActiveSessionUpdate',
    'Role', 'MessageType', 'Mode', 'MessageCreate', 'Message',
    'Scenario',
    'TextTurnRequest', 'ScenarioTurnRequest', 'AnalyzeRequest', 'Turn'
]
