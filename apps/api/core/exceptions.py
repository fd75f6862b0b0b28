"""
API error types.

Every error the API reports on purpose is an APIException: an HTTP status,
a readable detail and a stable error_code clients can branch on.
"""
from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class APIException(HTTPException):
    """HTTPException carrying an error_code and, when known, the offending field."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: str,
        field: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code
        self.field = field

    def to_dict(self) -> Dict[str, Any]:
        body = {"detail": self.detail, "error_code": self.error_code}
        if self.field:
            body["field"] = self.field
        return body


class ValidationError(APIException):
    """Athlete input the engine cannot interpret (dates, weekdays, counts)."""

    def __init__(self, detail: str, field: Optional[str] = None):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
            error_code=f"VALIDATION_ERROR_{field.upper()}" if field else "VALIDATION_ERROR",
            field=field,
        )


class ExportError(APIException):
    """A generated plan could not be turned into a file."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
            error_code="EXPORT_FAILED",
        )


class PlanGenerationError(APIException):
    """The engine failed on input it accepted."""

    def __init__(self, detail: str = "Plan generation failed"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            error_code="PLAN_GENERATION_FAILED",
        )
