"""
Run the API with uvicorn: `python -m bookcatalog` (or the `bookcatalog` script).

Host and port come from settings (BACKEND_HOST, PORT / BACKEND_PORT).
"""

import uvicorn

from bookcatalog.config import settings


def main() -> None:
    uvicorn.run(
        "bookcatalog.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
