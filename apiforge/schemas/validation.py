from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional

from .auth import AuthType


class ValidationIssue(BaseModel):
    field: str
    message: str
    code: str


class ValidationResult(BaseModel):
    is_valid: bool = Field(True, serialization_alias="isValid")
    errors: List[ValidationIssue] = []
    warnings: List[ValidationIssue] = []

    def add_error(self, field: str, message: str, code: str):
        self.errors.append(ValidationIssue(field=field, message=message, code=code))
        self.is_valid = False

    def add_warning(self, field: str, message: str, code: str):
        self.warnings.append(ValidationIssue(field=field, message=message, code=code))

    def merge(self, other: "ValidationResult", prefix: str = "") -> "ValidationResult":
        for issue in other.errors:
            self.add_error(f"{prefix}{issue.field}", issue.message, issue.code)
        for issue in other.warnings:
            self.add_warning(f"{prefix}{issue.field}", issue.message, issue.code)
        return self

    def error_codes(self) -> List[str]:
        return [issue.code for issue in self.errors]

    def warning_codes(self) -> List[str]:
        return [issue.code for issue in self.warnings]


class ValidateModelsRequest(BaseModel):
    # raw mappings so that malformed models are reported, not rejected
    models: List[Dict[str, Any]]
    # route collisions with the auth bundle are checked when set
    authentication: Optional[AuthType] = None
