"""Database initialization utilities."""

from typing import Any, Dict, List, Optional

from .connection import ConnectionManager
from .schema import INDEXES, CollectionIndex
from ..logging import get_logger
from ..exceptions import DatabaseError, ImaginifyError

logger = get_logger(__name__)


class DatabaseInitializer:
    """Declares collections and indexes once at process bootstrap."""
    
    def __init__(self, manager: ConnectionManager, indexes: Optional[List[CollectionIndex]] = None) -> None:
        self.manager = manager
        self.indexes = indexes if indexes is not None else INDEXES
    
    async def initialize_all(self) -> List[str]:
        """Connect and create every declared index. Returns the index names."""
        logger.info("Initializing database collections", index_count=len(self.indexes))
        
        db = await self.manager.acquire()
        created = []
        
        try:
            for index in self.indexes:
                name = await db[index.collection].create_index(index.keys, **index.create_kwargs())
                created.append(name)
                logger.debug("Index ensured", collection=index.collection, index=name)
        except Exception as e:
            logger.error("Database initialization failed", error=str(e))
            raise DatabaseError.from_exception(f"Database initialization failed: {e}", e)
        
        logger.info("Database initialization completed successfully", indexes=created)
        return created
    
    async def health_check(self) -> Dict[str, Any]:
        """Perform health check on the database connection."""
        health_status: Dict[str, Any] = {
            "mongodb": {"status": "unknown", "details": {}}
        }
        
        try:
            db = await self.manager.acquire()
            await db.command("ping")
            collections = await db.list_collection_names()
            health_status["mongodb"] = {
                "status": "healthy",
                "details": {
                    "connection": "ok",
                    "database": db.name,
                    "collections": sorted(collections)
                }
            }
        except ImaginifyError as e:
            health_status["mongodb"] = {
                "status": "unhealthy",
                "details": {"error": e.message}
            }
        except Exception as e:
            logger.warning("MongoDB health check failed", error=str(e))
            health_status["mongodb"] = {
                "status": "unhealthy",
                "details": {"error": str(e)}
            }
        
        return health_status
    
