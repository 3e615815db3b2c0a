from pydantic import BaseModel, EmailStr

from models.admin import AdminRole


class ApprovalUpdate(BaseModel):
    approved: bool


class RoleUpdate(BaseModel):
    role: AdminRole


class InviteRequest(BaseModel):
    email: EmailStr
    role: AdminRole = AdminRole.resolver


class CreateUserRequest(BaseModel):
    email: EmailStr
    password: str
    role: AdminRole = AdminRole.resolver
