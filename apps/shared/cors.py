"""Sentralisert CORS-konfigurasjon for alle backend-tjenester."""

import os
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware


ALLOWED_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]

ALLOWED_HEADERS = ["Origin", "X-Requested-With", "Content-Type", "Accept"]


def get_allowed_origins() -> list[str]:
    """Hent liste over tillatte CORS origins. Standard er alle origins."""
    configured = os.getenv("CORS_ORIGINS", "")
    origins = [origin.strip().rstrip("/") for origin in configured.split(",") if origin.strip()]
    return origins or ["*"]


def setup_cors(app: FastAPI) -> None:
    """Legg til CORS-middleware på en FastAPI-app."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_allowed_origins(),
        allow_methods=ALLOWED_METHODS,
        allow_headers=ALLOWED_HEADERS,
    )
