import os

import uvicorn

from dbmreader.core.config import LOG_PATH
from dbmreader.core.logger import setup_logging
from dbmreader.main import create_app


def main():
    setup_logging(LOG_PATH, level=os.environ.get("DBM_LOG_LEVEL", "INFO"))
    app = create_app()
    uvicorn.run(app, host=os.environ.get("DBM_HOST", "127.0.0.1"), port=int(os.environ.get("DBM_PORT", "8765")))


if __name__ == "__main__":
    main()
