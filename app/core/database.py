from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from loguru import logger
from sqlalchemy import inspect

from app.core.config import settings
from app.core.base import Base

SQLALCHEMY_DATABASE_URL = settings.SQLALCHEMY_DATABASE_URL

engine = create_engine(SQLALCHEMY_DATABASE_URL, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def init_db(recreate: bool = False, bind=None):
    """Initialize the database by creating all tables

    Args:
        recreate (bool): If True, drop all tables before creating them
        bind: Engine to use instead of the configured one
    """
    bind = bind if bind is not None else engine
    try:
        # Import all models here to avoid circular imports
        from app.models.lawsuit import Lawsuit
        from app.models.scan_log import ScanLog

        if recreate:
            logger.warning("Dropping all tables before recreating them")
            Base.metadata.drop_all(bind=bind)

        # Create all tables (and their indexes) if they don't exist
        Base.metadata.create_all(bind=bind)
        logger.info("Database tables created successfully")

        # Check for missing columns and add them
        inspector = inspect(bind)
        for table_name in Base.metadata.tables.keys():
            existing_columns = [col['name'] for col in inspector.get_columns(table_name)]
            table = Base.metadata.tables[table_name]

            for column in table.columns:
                if column.name not in existing_columns:
                    logger.info(f"Adding missing column {column.name} to table {table_name}")
                    column_type = column.type.compile(bind.dialect)

                    with bind.connect() as connection:
                        sql = text(f"ALTER TABLE {table_name} ADD COLUMN {column.name} {column_type} NULL")
                        connection.execute(sql)
                        connection.commit()

                    logger.info(f"Successfully added column {column.name} to table {table_name}")

    except Exception as e:
        logger.error(f"Error initializing database: {str(e)}")
        raise

def get_db():
    """
    Get database session
    """
    db = SessionLocal()
    try:
        yield db
    except Exception as e:
        logger.error(f"Database session error: {e}")
        raise
    finally:
        db.close()
