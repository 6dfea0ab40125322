# registre_backend/app/core/exceptions.py
"""Exceptions raised by the register export and translated to HTTP in main.py.

Every error carries a snake_case ``code``, an HTTP ``status_code`` and a
``context`` dict with the ids and limits involved; ``to_dict`` is the JSON
body sent to the client. Request rejections derive from
``RegistreExportError``; anything else is a server-side fault.
"""
from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .constants import (
    RATE_CONVERSION_SECONDS_TO_HOURS,
    RATE_CONVERSION_SECONDS_TO_MINUTES,
)


class AppError(Exception):
    """Root of the service's exceptions.

    Attributes
    ----------
    message
        Text shown to the requester (French for rejections).
    context
        Small JSON-safe dict: field names, limits, counts, ids.
    cause
        Underlying exception, kept for logs only.
    timestamp
        ISO-8601 UTC creation time.
    """

    code: str = "app_error"
    status_code: int = 500

    def __init__(
        self,
        message: str = "An application error occurred",
        *,
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.context = dict(context or {})
        self.timestamp = datetime.now(timezone.utc).isoformat()

    def __str__(self) -> str:
        text = f"{type(self).__name__}({self.code}): {self.message}"
        if self.context:
            text += f" | context={self.context}"
        if self.cause is not None:
            text += f" | cause={self.cause!r}"
        return text

    def to_dict(self) -> Dict[str, Any]:
        # cause is left out: it may hold driver or SQL details
        return {
            "error": {
                "type": type(self).__name__,
                "code": self.code,
                "message": self.message,
                "status_code": self.status_code,
                "context": self.context,
                "timestamp": self.timestamp,
            }
        }

    def with_context(self, **ctx: Any) -> "AppError":
        """Add non-None values to the context and return self, for ``raise``."""
        self.context.update({k: v for k, v in ctx.items() if v is not None})
        return self


class ExportConfigurationError(AppError):
    """Raised when no export configuration exists for the requested kind."""

    code = "export_configuration_missing"
    status_code = 500

    def __init__(self, kind: str, *, cause: Optional[BaseException] = None) -> None:
        super().__init__(
            f"Aucune configuration d'export n'est définie pour le type '{kind}'",
            cause=cause,
            context={"kind": kind},
        )


class RegistreExportError(AppError):
    """Base class for every request rejection of the register export.

    These are not crashes: the caller gets the message and decides whether
    and when to resubmit.
    """

    code = "registre_export_rejected"
    status_code = 400


_FIELD_HINTS = {
    "plageHoraire": "format: doublon de dates séparées par une virgule",
    "fuseauHoraire": "ex: 'Europe/Paris'",
}


class MissingFieldError(RegistreExportError):
    """A required request field is absent or blank."""

    code = "missing_field"

    def __init__(self, field: str, message: Optional[str] = None) -> None:
        hint = _FIELD_HINTS.get(field)
        msg = message or (
            f"Le payload ne contient pas de champ {field}"
            + (f" ({hint})" if hint else "")
        )
        super().__init__(msg, context={"field": field})
        self.field = field


class MalformedFieldError(MissingFieldError):
    """A request field is present but cannot be interpreted."""

    code = "malformed_field"

    def __init__(self, field: str, value: Any = None) -> None:
        hint = _FIELD_HINTS.get(field)
        msg = f"Le champ {field} est invalide" + (f" ({hint})" if hint else "")
        super().__init__(field, msg)
        if value is not None:
            self.context.setdefault("value", str(value))


class PeriodTooLargeError(RegistreExportError):
    """The requested period exceeds the configured ceiling."""

    code = "period_too_large"

    def __init__(self, limite_plage_horaire: int, duration_seconds: float) -> None:
        self.limit_hours = math.ceil(
            limite_plage_horaire / RATE_CONVERSION_SECONDS_TO_HOURS
        )
        super().__init__(
            "Vous ne pouvez pas exporter le registre avec une plage de dates "
            f"supérieure à {self.limit_hours} heures",
            context={
                "limit_seconds": limite_plage_horaire,
                "limit_hours": self.limit_hours,
                "duration_seconds": duration_seconds,
            },
        )


class DuplicateRequestError(RegistreExportError):
    """An unexpired export demand already exists for the requester."""

    code = "duplicate_request"
    status_code = 429

    def __init__(self, delai_retry: int, sub: Optional[str] = None) -> None:
        self.retry_minutes = math.ceil(delai_retry / RATE_CONVERSION_SECONDS_TO_MINUTES)
        super().__init__(
            "Un registre est déjà en cours de téléchargement, ou une demande "
            "d'export a déjà été effectuée il y a moins de "
            f"{self.retry_minutes} minutes",
            context={"retry_minutes": self.retry_minutes},
        )
        if sub is not None:
            self.context.setdefault("sub", sub)


class ExportTooLargeError(RegistreExportError):
    """The combined record count exceeds the configured maximum."""

    code = "export_too_large"
    status_code = 413

    def __init__(self, count: int, maximum: int) -> None:
        self.count = count
        self.maximum = maximum
        super().__init__(
            "Le registre est trop volumineux pour être téléchargé : "
            f"{count} fiches demandées pour un maximum de {maximum}",
            context={"count": count, "maximum": maximum},
        )


class InvalidScopeError(RegistreExportError):
    """The requester's service scope cannot be resolved."""

    code = "invalid_scope"
    status_code = 404

    def __init__(self, root_id: Any = None, message: Optional[str] = None) -> None:
        msg = message or (
            f"Le service racine {root_id} est introuvable"
            if root_id is not None
            else "Aucun service racine n'est associé à la demande"
        )
        super().__init__(msg)
        if root_id is not None:
            self.context.setdefault("root_id", str(root_id))


__all__ = [
    "AppError",
    "ExportConfigurationError",
    "RegistreExportError",
    "MissingFieldError",
    "MalformedFieldError",
    "PeriodTooLargeError",
    "DuplicateRequestError",
    "ExportTooLargeError",
    "InvalidScopeError",
]
