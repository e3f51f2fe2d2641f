import sys
from loguru import logger

from app.core.database import init_db
from app.services.company_roster import CompanyRoster

if __name__ == "__main__":
    recreate = "--recreate" in sys.argv[1:]
    try:
        # Create the lawsuit and scan log tables, dropping them first on --recreate
        init_db(recreate=recreate)
        roster = CompanyRoster.from_file()
        logger.info(f"Database initialization completed successfully, tracking {len(roster)} companies")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise
