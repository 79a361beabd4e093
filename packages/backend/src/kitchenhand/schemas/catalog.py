"""Pydantic schemas for catalog and account forms.

Learn: Pydantic v2 models validate the form input. The HTML forms show a
single error line, so form_error() reduces a ValidationError to the first
human-readable message ("Supplier name cannot be empty") and the route
raises ValidationFailed with it.
"""

import re
import uuid

from pydantic import BaseModel, ValidationError, field_validator, model_validator

from kitchenhand.db.models import PREP_TYPES, SHIFTS
from kitchenhand.errors import NotFound, ValidationFailed

_USERNAME_RE = re.compile(r"^[A-Za-z0-9_]+$")


def _not_blank(value: str, label: str) -> str:
    if not value or not value.strip():
        raise ValueError(f"{label} cannot be empty")
    return value


def form_error(exc: ValidationError) -> str:
    """First validation message, without pydantic's "Value error, " prefix."""
    for err in exc.errors():
        if err.get("type") == "value_error" and "error" in err.get("ctx", {}):
            return str(err["ctx"]["error"])
        return err.get("msg", "Invalid form data")
    return "Invalid form data"


def parse_record_id(raw: str, what: str) -> uuid.UUID:
    """Path ids that aren't UUIDs can't match any row, so they are a 404."""
    try:
        return uuid.UUID(raw)
    except ValueError:
        raise NotFound(f"{what} not found")


def parse_form(model: type[BaseModel], data: dict) -> BaseModel:
    """Validate data into model, raising ValidationFailed on the first error."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ValidationFailed(form_error(e)) from e


# ─── Products ───────────────────────────────────────────

class ProductForm(BaseModel):
    supplier_name: str = ""
    product_name: str = ""
    location: str = ""
    description: str = ""

    @field_validator("supplier_name")
    @classmethod
    def _supplier(cls, v: str) -> str:
        return _not_blank(v, "Supplier name")

    @field_validator("product_name")
    @classmethod
    def _product(cls, v: str) -> str:
        return _not_blank(v, "Product name")

    @field_validator("location")
    @classmethod
    def _location(cls, v: str) -> str:
        return _not_blank(v, "Location")

    @field_validator("description")
    @classmethod
    def _description(cls, v: str) -> str:
        return _not_blank(v, "Description")


# ─── Preparations ───────────────────────────────────────

class PreparationForm(BaseModel):
    name: str = ""
    prep_type: str = ""
    shift: str = ""
    location: str = ""
    steps: str = ""

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        return _not_blank(v, "Preparation name")

    @field_validator("prep_type")
    @classmethod
    def _prep_type(cls, v: str) -> str:
        if v not in PREP_TYPES:
            raise ValueError("Invalid preparation type")
        return v

    @field_validator("shift")
    @classmethod
    def _shift(cls, v: str) -> str:
        if v not in SHIFTS:
            raise ValueError("Invalid shift selection")
        return v

    @field_validator("location")
    @classmethod
    def _location(cls, v: str) -> str:
        return _not_blank(v, "Location")

    @field_validator("steps")
    @classmethod
    def _steps(cls, v: str) -> str:
        return _not_blank(v, "Steps")


class StepInput(BaseModel):
    """One step as submitted; picture_url is filled in after upload."""
    description: str = ""
    picture_url: str = ""


# ─── Accounts ───────────────────────────────────────────

class LoginForm(BaseModel):
    username: str = ""
    password: str = ""


class RegisterForm(BaseModel):
    username: str = ""
    email: str = ""
    password: str = ""
    confirm_password: str = ""

    @field_validator("username")
    @classmethod
    def _username(cls, v: str) -> str:
        _not_blank(v, "Username")
        if len(v) < 3:
            raise ValueError("Username must be at least 3 characters")
        if len(v) > 50:
            raise ValueError("Username cannot exceed 50 characters")
        if not _USERNAME_RE.match(v):
            raise ValueError("Username can only contain letters, numbers, and underscores")
        return v

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        _not_blank(v, "Email")
        if "@" not in v or "." not in v:
            raise ValueError("Invalid email format")
        return v

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters")
        return v

    @model_validator(mode="after")
    def _passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self
