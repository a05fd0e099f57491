"""
AI program API.

Lists programs and drives the acceptance state machine. Accepting expands
the program onto the calendar starting at ``start_date`` (next Monday when
omitted). Clients should call GET /planned-workouts/count first and ask the
user whether existing planned workouts should be archived.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from pydantic import BaseModel
from typing import List, Optional
from uuid import UUID
from datetime import date
import logging

from core.database import get_db
from core.auth import get_current_user
from core.exceptions import NotFoundError
from models import AIProgram, User
from schemas import AIProgramResponse
from services.program_acceptance import accept_program, count_planned_workouts, reject_program

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/programs", tags=["programs"])


# ============ Request/Response Models ============

class AcceptProgramRequest(BaseModel):
    start_date: Optional[date] = None
    archive_planned: bool = False


class PlannedCountResponse(BaseModel):
    planned_workouts: int


# ============ Endpoints ============

@router.get("", response_model=List[AIProgramResponse])
def list_programs(
    status: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    query = db.query(AIProgram).filter(AIProgram.user_id == current_user.id)
    if status:
        query = query.filter(AIProgram.status == status)
    return query.order_by(AIProgram.created_at.desc()).all()


@router.get("/active", response_model=AIProgramResponse)
def get_active_program(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    program = (
        db.query(AIProgram)
        .filter(AIProgram.user_id == current_user.id, AIProgram.status == "active")
        .order_by(AIProgram.started_at.desc())
        .first()
    )
    if not program:
        raise NotFoundError("No active program")
    return program


@router.get("/planned-workouts/count", response_model=PlannedCountResponse)
def planned_workouts_count(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return {"planned_workouts": count_planned_workouts(db, current_user)}


@router.get("/{program_id}", response_model=AIProgramResponse)
def get_program(
    program_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    program = (
        db.query(AIProgram)
        .filter(AIProgram.id == program_id, AIProgram.user_id == current_user.id)
        .first()
    )
    if not program:
        raise NotFoundError("Program not found")
    return program


@router.post("/{program_id}/accept", response_model=AIProgramResponse)
def accept(
    program_id: UUID,
    payload: Optional[AcceptProgramRequest] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    payload = payload or AcceptProgramRequest()
    return accept_program(
        db,
        current_user,
        program_id,
        start_date=payload.start_date,
        archive_planned=payload.archive_planned,
    )


@router.post("/{program_id}/reject", response_model=AIProgramResponse)
def reject(
    program_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return reject_program(db, current_user, program_id)
