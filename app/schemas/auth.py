from pydantic import BaseModel, ConfigDict, EmailStr, Field


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UserProfile(BaseModel):
    id: int
    firstname: str
    lastname: str
    email: str
    role: str


class MeResponse(UserProfile):
    model_config = ConfigDict(populate_by_name=True)

    account_id: int = Field(alias="accountId")
    permissions: list[str] = []


class ChangePasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(alias="currentPassword")
    new_password: str = Field(min_length=8, alias="newPassword")
