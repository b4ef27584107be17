import uvicorn

from app.platform.config import settings
from app.platform.logger import get_logger

logger = get_logger("server")


def main():
    logger.info(f"Backend running on http://localhost:{settings.PORT}")
    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    main()
