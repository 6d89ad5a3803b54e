"""
development server runner for reelgrab
"""

import uvicorn

from reelgrab.helper.config import get_settings


def main():
    settings = get_settings()
    uvicorn.run(
        "reelgrab.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level,
        ssl_keyfile=settings.ssl_keyfile,
        ssl_certfile=settings.ssl_certfile,
        workers=1
    )


if __name__ == "__main__":
    main()
