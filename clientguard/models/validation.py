"""Validation result data models."""

from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict


class UserRole(str, Enum):
    """Closed set of account roles."""

    PATIENT = "patient"
    THERAPIST = "therapist"
    SUPERVISOR = "supervisor"


class ValidationResult(BaseModel):
    """Result of a single field validation."""

    model_config = ConfigDict(frozen=True)

    is_valid: bool
    error: Optional[str] = None


class FormResult(BaseModel):
    """Aggregated result of validating every field of a form."""

    model_config = ConfigDict(frozen=True)

    is_valid: bool
    errors: Dict[str, str] = {}
