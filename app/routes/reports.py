from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database.db import get_db
from app.routes.deps import require_admin
from app.schemas.reports import StatsOut
from app.services.reports import get_dashboard_stats

router = APIRouter(prefix="/api/admin", tags=["reports"], dependencies=[Depends(require_admin)])


@router.get("/stats", response_model=StatsOut)
def dashboard_stats(db: Session = Depends(get_db)):
    """Aggregate counts, category breakdown and the most registered events."""
    return get_dashboard_stats(db)
