# scripts/check_db.py
# Проверяет подключение к DATABASE_URL из storefront.core.config.settings
import sys

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from storefront.core.config import settings

def main() -> int:
    url = settings.DATABASE_URL
    print('Trying to connect to:', url)
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    engine = create_engine(url, connect_args=connect_args)
    try:
        with engine.connect() as conn:
            print('Connection OK, SELECT 1 ->', conn.execute(text("SELECT 1")).scalar())
    except SQLAlchemyError as e:
        print('Connection failed:', e)
        return 1
    finally:
        engine.dispose()
    return 0

if __name__ == '__main__':
    sys.exit(main())
