"""Savings goals"""

import uuid
from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from inova_gateway.api.dependencies import get_request_id
from inova_gateway.api.errors import to_http_error
from inova_gateway.api.v1.schemas import GoalContribution, GoalCreate, GoalSchema, GoalUpdate
from inova_gateway.domain.exceptions import DomainException
from inova_gateway.infrastructure.database.models import Goal
from inova_gateway.infrastructure.database.repositories import GoalRepository, UserRepository
from inova_gateway.infrastructure.database.session import get_db
from inova_gateway.utils.date_utils import days_between

router = APIRouter()


def to_schema(goal: Goal, today: date) -> GoalSchema:
    target = goal.target_amount_cents
    progress = min(100.0, round(goal.current_amount_cents * 100 / target, 2)) if target else 0.0
    return GoalSchema(
        id=str(goal.id),
        title=goal.title,
        target_amount_cents=target,
        current_amount_cents=goal.current_amount_cents,
        deadline=goal.deadline,
        progress_percent=progress,
        days_remaining=max(0, days_between(today, goal.deadline)),
        completed=goal.current_amount_cents >= target,
    )


@router.post("/users/{matricula}/goals", response_model=GoalSchema, status_code=201)
def create_goal(matricula: int, body: GoalCreate, request: Request, db: Session = Depends(get_db)):
    request_id = get_request_id(request)
    try:
        UserRepository(db).get_or_404(matricula)
        goal = GoalRepository(db).create(
            matricula=matricula,
            title=body.title.strip(),
            target_amount_cents=body.target_amount_cents,
            current_amount_cents=body.current_amount_cents,
            deadline=body.deadline,
        )
        db.commit()
        return to_schema(goal, date.today())
    except DomainException as e:
        raise to_http_error(e, db, request_id)


@router.get("/users/{matricula}/goals", response_model=List[GoalSchema])
def list_goals(matricula: int, db: Session = Depends(get_db)):
    today = date.today()
    return [to_schema(g, today) for g in GoalRepository(db).list_active(matricula)]


@router.patch("/users/{matricula}/goals/{goal_id}", response_model=GoalSchema)
def update_goal(matricula: int, goal_id: uuid.UUID, body: GoalUpdate, request: Request, db: Session = Depends(get_db)):
    request_id = get_request_id(request)
    try:
        goals = GoalRepository(db)
        goal = goals.update(goals.get_or_404(matricula, goal_id), body.model_dump(exclude_unset=True))
        db.commit()
        return to_schema(goal, date.today())
    except DomainException as e:
        raise to_http_error(e, db, request_id)


@router.post("/users/{matricula}/goals/{goal_id}/contributions", response_model=GoalSchema)
def contribute(matricula: int, goal_id: uuid.UUID, body: GoalContribution, request: Request, db: Session = Depends(get_db)):
    """Add money to a goal; progress is capped at 100%"""
    request_id = get_request_id(request)
    try:
        goals = GoalRepository(db)
        goal = goals.get_or_404(matricula, goal_id)
        goals.update(goal, {"current_amount_cents": goal.current_amount_cents + body.amount_cents})
        db.commit()
        return to_schema(goal, date.today())
    except DomainException as e:
        raise to_http_error(e, db, request_id)


@router.delete("/users/{matricula}/goals/{goal_id}", status_code=204)
def delete_goal(matricula: int, goal_id: uuid.UUID, request: Request, db: Session = Depends(get_db)):
    request_id = get_request_id(request)
    try:
        goals = GoalRepository(db)
        goals.deactivate(goals.get_or_404(matricula, goal_id))
        db.commit()
    except DomainException as e:
        raise to_http_error(e, db, request_id)
