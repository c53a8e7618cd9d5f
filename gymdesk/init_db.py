import logging

from flask_migrate import upgrade

from gymdesk.app import create_app


def setup_logging():
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )
    return logging.getLogger(__name__)


def init_database():
    """Run all pending migrations against DATABASE_URL."""
    logger = setup_logging()
    app = create_app()

    with app.app_context():
        try:
            logger.info("Running database migrations...")
            upgrade(directory=app.config['MIGRATIONS_DIR'])
            logger.info("Migrations completed successfully")
            return True
        except Exception:
            logger.exception("Database initialization failed")
            return False


def main():
    logger = setup_logging()
    logger.info("Starting database initialization...")

    if init_database():
        logger.info("Database initialization completed successfully!")
        return 0

    logger.error("Database initialization failed!")
    return 1


if __name__ == '__main__':
    raise SystemExit(main())
