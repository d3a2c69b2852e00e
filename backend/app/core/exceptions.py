"""
Custom Exceptions for the Vibe Coding Platform
==============================================

Use these instead of generic Exception so that:
1. Tool failures can be turned into failure envelopes without aborting a turn
2. The API layer can map errors to HTTP status codes in one place
3. Clients get meaningful error messages

Usage:
    from app.core.exceptions import SandboxViolationError, ProjectNotFoundError

    if not project:
        raise ProjectNotFoundError(project_id)
"""

from typing import Optional, Any, Dict


class VibeCodingError(Exception):
    """Base exception for all platform errors"""

    status_code = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Authentication Errors
# ============================================

class AuthenticationError(VibeCodingError):
    """Caller identity could not be established"""

    status_code = 401

    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(message, code="AUTH_FAILED")


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(VibeCodingError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} with ID '{resource_id}' not found",
            code=f"{resource_type.upper()}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class ProjectNotFoundError(ResourceNotFoundError):
    """Project not found (or owned by someone else)"""

    def __init__(self, project_id: str):
        super().__init__("Project", project_id)


class FileNotFoundInProjectError(VibeCodingError):
    """File or directory missing inside a project root"""

    status_code = 404

    def __init__(self, path: str, kind: str = "File"):
        shown = path or "/"
        super().__init__(
            f"{kind} {shown} does not exist",
            code="FILE_NOT_FOUND",
            details={"path": path}
        )


# ============================================
# Validation Errors (400-type)
# ============================================

class ValidationError(VibeCodingError):
    """Input validation failed"""

    status_code = 422

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class InvalidProjectIdError(ValidationError):
    """Project id is not a valid host label"""

    def __init__(self, project_id: str):
        super().__init__(
            "Project id must be 1-32 lowercase letters or digits",
            field="projectId"
        )
        self.code = "INVALID_PROJECT_ID"
        self.details["project_id"] = project_id


# ============================================
# Sandbox / Storage Errors
# ============================================

class SandboxViolationError(VibeCodingError):
    """Path escapes the project root, is absolute, or crosses a symlink"""

    status_code = 400

    def __init__(self, path: str, reason: str = "Path is outside the project directory"):
        super().__init__(reason, code="SANDBOX_VIOLATION", details={"path": path})


class FileOperationError(VibeCodingError):
    """Underlying filesystem operation failed"""

    def __init__(self, path: str, message: str):
        super().__init__(message, code="FILE_OPERATION_FAILED", details={"path": path})


# ============================================
# AI/Claude Errors
# ============================================

class ProviderError(VibeCodingError):
    """Model provider or transport failed mid-generation"""

    status_code = 502

    def __init__(self, message: str):
        super().__init__(message, code="PROVIDER_ERROR")


# ============================================
# Helper function for API responses
# ============================================

def error_response(error: VibeCodingError) -> Dict[str, Any]:
    """Convert exception to API error response format"""
    return {
        "success": False,
        "error": error.to_dict()
    }
