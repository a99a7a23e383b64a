"""Exceptions raised by the service layer."""

from collections.abc import Iterator
from contextlib import contextmanager

import pydantic


class CRMError(Exception):
    """Base exception for business-rule violations."""

    pass


class NotFoundError(CRMError):
    """Referenced row does not exist."""

    pass


class DuplicateError(CRMError):
    """A unique field (email, username, tax id) is already taken."""

    pass


class IntegrityError(CRMError):
    """A foreign key points to a row that does not exist."""

    pass


class RoleError(CRMError):
    """The change would break a role rule (e.g. admin with agent role)."""

    pass


class ValidationError(CRMError):
    """Invalid field value or combination of values."""

    pass


class AuthenticationError(CRMError):
    """Wrong email or password."""

    pass


class ReportGenerationError(CRMError):
    """The AI report could not be generated."""

    pass


@contextmanager
def validation_errors() -> Iterator[None]:
    """Re-raise pydantic validation failures as ValidationError."""
    try:
        yield
    except pydantic.ValidationError as e:
        messages = [
            f"{'.'.join(str(p) for p in err['loc']) or 'value'}: {err['msg']}"
            for err in e.errors()
        ]
        raise ValidationError("; ".join(messages)) from e
