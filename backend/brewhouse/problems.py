# Overview: JSON problem responses shared by the API routes.

from __future__ import annotations

from flask import request

from .validation import ValidationError

TITLES = {
    400: "Validation failed",
    404: "Not found",
    409: "Conflict",
    500: "Internal server error",
}


def problem(status: int, detail: str, *, title: str | None = None, **extra):
    """
    Build a (body, status) problem response.

    `error` mirrors `detail` (the {"error": ...} shape used across the API).
    """
    body = {
        "type": "about:blank",
        "title": title or TITLES.get(status, "Error"),
        "status": status,
        "detail": detail,
        "path": request.path,
        "error": detail,
    }
    body.update(extra)
    return body, status


def validation_problem(exc: ValidationError):
    extra = {"errors": exc.fields} if exc.fields else {}
    return problem(400, str(exc), **extra)
