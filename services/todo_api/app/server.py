import logging, sys

import uvicorn
from pydantic import ValidationError

from app.settings import get_settings
from app.main import create_app, setup_logging

logger = logging.getLogger("app.server")


def serve():
    # configuration problems stop the process before anything is served
    try:
        settings = get_settings()
    except ValidationError as e:
        setup_logging()
        for err in e.errors():
            field = ".".join(str(p) for p in err["loc"]) or "settings"
            logger.error("invalid configuration: %s: %s", field, err["msg"])
        sys.exit(1)

    app = create_app(settings)
    logger.info("API listening on %s:%s", settings.HOST, settings.PORT)
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    serve()
