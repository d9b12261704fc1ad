"""Coach domain exceptions."""

from typing import Optional


class CoachError(Exception):
    """Base exception for the coach backend."""

    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(CoachError):
    """Missing or malformed input."""

    def __init__(self, message: str):
        super().__init__(message=message, code="VALIDATION_ERROR")


class NotFoundError(CoachError):
    """Unknown session or message id."""


class SessionNotFoundError(NotFoundError):
    """Session does not exist."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(
            message=f"Session {session_id} not found",
            code="SESSION_NOT_FOUND"
        )


class MessageNotFoundError(NotFoundError):
    """Message does not exist."""

    def __init__(self, message_id: str):
        self.message_id = message_id
        super().__init__(
            message=f"Message {message_id} not found",
            code="MESSAGE_NOT_FOUND"
        )


class SessionBusyError(CoachError):
    """A coach reply is already pending for the session."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(
            message=f"Session {session_id} is already awaiting a coach reply",
            code="SESSION_BUSY"
        )


class StorageError(CoachError):
    """Persistence layer unavailable or failed."""

    def __init__(self, operation: str, details: Optional[str] = None):
        message = f"Storage error during {operation}"
        if details:
            message += f": {details}"

        super().__init__(message=message, code="STORAGE_ERROR")


class UploadError(CoachError):
    """Image upload collaborator failed."""

    def __init__(self, details: str):
        super().__init__(message=f"Upload failed: {details}", code="UPLOAD_ERROR")


class AnalysisError(CoachError):
    """Vision analysis collaborator failed or timed out."""

    def __init__(self, details: str):
        super().__init__(message=f"Analysis failed: {details}", code="ANALYSIS_ERROR")


class UnknownScenarioError(CoachError):
    """Scenario id is not in the catalog."""

    def __init__(self, scenario_id: str):
        self.scenario_id = scenario_id
        super().__init__(
            message=f"Unknown scenario: {scenario_id}",
            code="UNKNOWN_SCENARIO"
        )
