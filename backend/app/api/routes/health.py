from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from app.api.deps import get_pool
from app.db.connection import DatabasePool

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check(pool: DatabasePool = Depends(get_pool)):
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": pool.test_connection(),
    }
