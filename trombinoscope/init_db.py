"""
Initialisation de la base: python -m trombinoscope.init_db
"""
import logging

from trombinoscope.config import settings
from trombinoscope.database import init_db

logger = logging.getLogger(__name__)


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
    init_db()
    logger.info("Base initialisée: %s", settings.database_url)


if __name__ == "__main__":
    main()
