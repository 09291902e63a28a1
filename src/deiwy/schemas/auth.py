"""Request and response schemas for the authentication pages.

Field names follow the web client's capitalised JSON keys.
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator


class RegisterRequest(BaseModel):
    """Registration form submission."""

    firstname: str = Field(..., alias="Firstname")
    lastname: str = Field(..., alias="Lastname")
    username: str = Field(..., alias="Username")
    email: str = Field(..., alias="Email")
    password: str = Field(..., alias="Password")

    model_config = ConfigDict(populate_by_name=True)


class SignInRequest(BaseModel):
    """Sign-in form submission."""

    email: str = Field(..., alias="Email")
    password: str = Field(..., alias="Password")
    remember_me: bool = Field(False, alias="RememberMe")

    model_config = ConfigDict(populate_by_name=True)


class VerifyEmailRequest(BaseModel):
    """Verification code typed into the email verification page."""

    verification_code: str = Field(..., alias="VerificationCode")

    model_config = ConfigDict(populate_by_name=True)


class ResendVerificationRequest(BaseModel):
    """Values displayed on the verification page, echoed back by the resend button."""

    firstname: str | None = Field(None, alias="Firstname")
    email: str | None = Field(None, alias="Email")

    model_config = ConfigDict(populate_by_name=True)


class EmailVerificationInfo(BaseModel):
    """Details shown on the email verification page."""

    email: str = Field(..., serialization_alias="Email", description="Masked email address")
    firstname: str = Field(..., serialization_alias="Firstname")
    flash_messages: dict[str, str] | None = Field(None, serialization_alias="FlashMessages")


class ForgotPasswordRequest(BaseModel):
    email: str = Field(..., alias="Email")

    model_config = ConfigDict(populate_by_name=True)


class ResetPasswordRequest(BaseModel):
    """New password submitted from the reset-password link."""

    token: str = Field(..., alias="Token")
    password: str = Field(..., alias="Password")
    confirm_password: str = Field(..., alias="ConfirmPassword")

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="after")
    def _passwords_match(self) -> "ResetPasswordRequest":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., alias="CurrentPassword")
    new_password: str = Field(..., alias="NewPassword")
    confirm_password: str = Field(..., alias="ConfirmPassword")

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="after")
    def _passwords_match(self) -> "ChangePasswordRequest":
        if self.new_password != self.confirm_password:
            raise ValueError("Passwords do not match")
        if self.new_password == self.current_password:
            raise ValueError("The new password must differ from the current one")
        return self
