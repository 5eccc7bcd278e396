from pydantic import BaseModel, EmailStr, field_validator, model_validator

MIN_PASSWORD_LENGTH = 8


def _check_password(value: str, label: str = "Password") -> str:
    if len(value) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"{label} must be at least {MIN_PASSWORD_LENGTH} characters")
    return value


class _EmailNormalized(BaseModel):
    email: EmailStr

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.strip().lower()


class UserRegister(_EmailNormalized):
    password: str
    confirm_password: str

    @field_validator("password")
    @classmethod
    def password_min_length(cls, v: str) -> str:
        return _check_password(v)

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class UserLogin(_EmailNormalized):
    password: str


class ForgotPasswordRequest(_EmailNormalized):
    pass


class UserResponse(BaseModel):
    """Account view. `role` is the marketplace role of the profile, when one exists."""

    id: str
    email: str
    has_profile: bool = False
    role: str | None = None
    is_admin: bool = False
    requires_password_change: bool = False

    class Config:
        from_attributes = True


class ChangePasswordRequest(BaseModel):
    new_password: str
    confirm_password: str

    @field_validator("new_password")
    @classmethod
    def password_min_length(cls, v: str) -> str:
        return _check_password(v)

    @model_validator(mode="after")
    def passwords_match(self):
        if self.new_password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class AccountUpdate(BaseModel):
    email: EmailStr | None = None
    current_password: str | None = None
    new_password: str | None = None
    confirm_new_password: str | None = None

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str | None) -> str | None:
        return v.strip().lower() if v else v

    @field_validator("new_password")
    @classmethod
    def password_min_length(cls, v: str | None) -> str | None:
        return _check_password(v, "New password") if v is not None else v

    @model_validator(mode="after")
    def password_change_valid(self):
        if self.new_password is not None:
            if not self.current_password:
                raise ValueError("Current password is required to set a new password")
            if self.new_password != self.confirm_new_password:
                raise ValueError("New password and confirmation do not match")
        return self


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
