"""
Run the Blog API under uvicorn.

Usage:
    python -m apps.blog

Host and port are read from the ``HOST`` and ``PORT`` environment variables.
Defaults are ``0.0.0.0`` and ``5000``.
"""
import os

import uvicorn


def main() -> None:
    uvicorn.run(
        "apps.blog.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "5000")),
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )


if __name__ == "__main__":
    main()
