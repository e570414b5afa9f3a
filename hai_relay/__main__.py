"""以 `python -m hai_relay` 启动服务。"""

import uvicorn

from hai_relay.config.settings import settings
from hai_relay.infrastructure.logging.logger import logger


def main() -> None:
    logger.info(f"Server listening on port {settings.port}")
    uvicorn.run("hai_relay.api.app:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
