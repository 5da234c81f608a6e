"""Auth Pydantic schemas for request / response validation."""


from typing import Optional

from pydantic import BaseModel, Field

from hrms.common.constants import UserRole
from hrms.employees.schemas import EmployeeBrief


# ── Requests ────────────────────────────────────────────────────────

class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, description="Email or employee number")
    password: str = Field(..., min_length=1)


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=8)


class RoleUpdateRequest(BaseModel):
    role: UserRole


class RoleUpdateItem(BaseModel):
    user_id: int
    role: UserRole


class BulkRoleUpdateRequest(BaseModel):
    updates: list[RoleUpdateItem] = Field(..., min_length=1)


# ── Responses ───────────────────────────────────────────────────────

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: EmployeeBrief


class MeResponse(EmployeeBrief):
    permissions: list[str]
    reporting_manager_id: Optional[int] = None
    department_id: Optional[int] = None
    direct_reports_count: int = 0


class BulkRoleUpdateResponse(BaseModel):
    success: bool = True
    updated_count: int
    failed_count: int
    failures: list[dict] = []
