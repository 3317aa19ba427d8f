"""
Persistence package: exposes the process-wide DBStorage singleton.

The engine is created lazily by `storage.reload()`, which the application
factory calls with the configured DATABASE_URL.
"""
from models.db_storage import DBStorage

storage = DBStorage()
