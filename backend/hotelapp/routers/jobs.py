"""
Lifecycle jobs: scheduled state and manual runs (admin)
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from hotelapp.database import get_db
from hotelapp.jobs.interfaces import StoreUnavailableError
from hotelapp.jobs.scheduling import JOB_BUILDERS
from hotelapp.security.auth import CurrentUser, require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/jobs", tags=["Jobs"])


@router.get("", response_model=List[dict])
def list_jobs(
    request: Request,
    current_user: CurrentUser = Depends(require_admin)
):
    """Registered jobs; without a running scheduler only their ids are known"""
    backend = getattr(request.app.state, "scheduler", None)
    if backend is not None:
        return backend.get_jobs()
    return [{"id": job_id, "status": "disabled"} for job_id in JOB_BUILDERS]


@router.post("/{job_id}/run")
def run_job(
    job_id: str,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin)
):
    """Run a job once, now, in the request"""
    builder = JOB_BUILDERS.get(job_id)
    if builder is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Job not found: {job_id}")
    logger.info(f"Manual run of {job_id} by {current_user.username}")
    try:
        return builder(db).run().to_dict()
    except StoreUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
