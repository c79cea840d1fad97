"""API routes for habitplanet"""
import logging
from datetime import datetime, timezone
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Request, status

from habitplanet.api.models import (
    CreateUserRequest,
    CheckInRequest,
    StatsResponse,
    AdviceResponse,
    HealthCheckResponse,
)
from habitplanet.api.auth import verify_api_key
from habitplanet.api.middleware import limiter
from habitplanet.exceptions import HabitPlanetError
from habitplanet.models import CheckInResult, DrawResult, Habit, HabitCreate, User
from habitplanet.resilience import CONTENT_BREAKER
from habitplanet.services import get_container

logger = logging.getLogger(__name__)

router = APIRouter()


def _http_error(error: HabitPlanetError) -> HTTPException:
    """Map a domain error onto its HTTP status, keeping the serialized error as detail"""
    return HTTPException(status_code=error.status_code, detail=error.to_dict())


def _internal_error(endpoint: str, error: Exception) -> HTTPException:
    logger.error(f"Error in {endpoint}: {error}", exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=str(error)
    )


# ==========================================
# Users
# ==========================================

@router.post("/api/v1/users", response_model=User, status_code=status.HTTP_201_CREATED)
@limiter.limit("20/minute")
async def create_user_endpoint(
    request: Request,
    body: CreateUserRequest,
    api_key: str = Depends(verify_api_key)
):
    """Create a new user (Rate limit: 20/minute)"""
    try:
        return await get_container().user_service.create_user(
            body.user_id,
            name=body.name,
            starter_habits=body.starter_habits
        )
    except HabitPlanetError as e:
        raise _http_error(e)
    except Exception as e:
        raise _internal_error("create_user", e)


@router.get("/api/v1/users/{user_id}", response_model=User)
@limiter.limit("60/minute")
async def get_user_profile(
    request: Request,
    user_id: str,
    api_key: str = Depends(verify_api_key)
):
    """Coins, pet progression, inventory and card collection"""
    try:
        return await get_container().user_service.get_user_profile(user_id)
    except HabitPlanetError as e:
        raise _http_error(e)
    except Exception as e:
        raise _internal_error("get_user_profile", e)


@router.get("/api/v1/users/{user_id}/stats", response_model=StatsResponse)
@limiter.limit("30/minute")
async def get_stats(
    request: Request,
    user_id: str,
    api_key: str = Depends(verify_api_key)
):
    """Full check-in history, oldest first"""
    try:
        check_ins = await get_container().user_service.get_stats(user_id)
        return StatsResponse(
            user_id=user_id,
            total_check_ins=len(check_ins),
            check_ins=check_ins
        )
    except HabitPlanetError as e:
        raise _http_error(e)
    except Exception as e:
        raise _internal_error("get_stats", e)


@router.get("/api/v1/users/{user_id}/advice", response_model=AdviceResponse)
@limiter.limit("10/minute")
async def get_advice(
    request: Request,
    user_id: str,
    api_key: str = Depends(verify_api_key)
):
    """
    Coaching advice for the user's habits

    Rate limit: 10 requests per minute (AI calls are expensive)
    """
    try:
        advice = await get_container().user_service.get_advice(user_id)
        return AdviceResponse(user_id=user_id, advice=advice)
    except HabitPlanetError as e:
        raise _http_error(e)
    except Exception as e:
        raise _internal_error("get_advice", e)


# ==========================================
# Habits
# ==========================================

@router.get("/api/v1/users/{user_id}/habits", response_model=list[Habit])
@limiter.limit("60/minute")
async def list_habits(
    request: Request,
    user_id: str,
    api_key: str = Depends(verify_api_key)
):
    """The user's habits, newest first, with today's progress"""
    try:
        return await get_container().habit_service.list_habits(user_id)
    except HabitPlanetError as e:
        raise _http_error(e)
    except Exception as e:
        raise _internal_error("list_habits", e)


@router.post(
    "/api/v1/users/{user_id}/habits",
    response_model=Habit,
    status_code=status.HTTP_201_CREATED
)
@limiter.limit("20/minute")
async def create_habit(
    request: Request,
    user_id: str,
    body: HabitCreate,
    api_key: str = Depends(verify_api_key)
):
    try:
        return await get_container().habit_service.create_habit(user_id, body)
    except HabitPlanetError as e:
        raise _http_error(e)
    except Exception as e:
        raise _internal_error("create_habit", e)


@router.delete("/api/v1/users/{user_id}/habits/{habit_id}")
@limiter.limit("20/minute")
async def delete_habit(
    request: Request,
    user_id: str,
    habit_id: str,
    api_key: str = Depends(verify_api_key)
):
    """Delete a habit; its check-in history is kept"""
    try:
        await get_container().habit_service.delete_habit(user_id, habit_id)
        return {"habit_id": habit_id, "deleted": True}
    except HabitPlanetError as e:
        raise _http_error(e)
    except Exception as e:
        raise _internal_error("delete_habit", e)


@router.post(
    "/api/v1/users/{user_id}/habits/{habit_id}/subtasks/{subtask_id}/toggle",
    response_model=Habit
)
@limiter.limit("60/minute")
async def toggle_subtask(
    request: Request,
    user_id: str,
    habit_id: str,
    subtask_id: str,
    api_key: str = Depends(verify_api_key)
):
    try:
        return await get_container().habit_service.toggle_subtask(user_id, habit_id, subtask_id)
    except HabitPlanetError as e:
        raise _http_error(e)
    except Exception as e:
        raise _internal_error("toggle_subtask", e)


@router.post("/api/v1/users/{user_id}/habits/{habit_id}/check-in", response_model=CheckInResult)
@limiter.limit("30/minute")
async def check_in(
    request: Request,
    user_id: str,
    habit_id: str,
    body: Optional[CheckInRequest] = None,
    api_key: str = Depends(verify_api_key)
):
    """
    Check in on a habit

    Returns the stored record, the updated habit and the rewards earned.
    409 when a single-target habit is already done today.
    """
    body = body or CheckInRequest()
    try:
        return await get_container().habit_service.check_in(
            user_id,
            habit_id,
            note=body.note,
            lat=body.lat,
            lng=body.lng
        )
    except HabitPlanetError as e:
        raise _http_error(e)
    except Exception as e:
        raise _internal_error("check_in", e)


# ==========================================
# Cards
# ==========================================

@router.post("/api/v1/users/{user_id}/cards/draw", response_model=DrawResult)
@limiter.limit("10/minute")
async def draw_card(
    request: Request,
    user_id: str,
    api_key: str = Depends(verify_api_key)
):
    """
    Spend coins on a card draw

    402 when the balance is below the draw cost.
    Rate limit: 10 requests per minute (card art calls are expensive)
    """
    try:
        return await get_container().gacha_service.draw_card(user_id)
    except HabitPlanetError as e:
        raise _http_error(e)
    except Exception as e:
        raise _internal_error("draw_card", e)


# ==========================================
# Monitoring
# ==========================================

@router.get("/api/health", response_model=HealthCheckResponse)
@limiter.limit("60/minute")
async def health_check(request: Request):
    """Health check endpoint (Rate limit: 60/minute for monitoring systems)"""
    container = get_container()

    try:
        storage_ok = await container.state.repository.kv.ping()
    except Exception as e:
        logger.error(f"Storage health check failed: {e}")
        storage_ok = False
    storage_status = "available" if storage_ok else "unavailable"

    if not container.content.is_configured:
        content_status = "unconfigured"
    elif CONTENT_BREAKER.current_state == "open":
        content_status = "circuit_open"
    else:
        content_status = "available"

    return HealthCheckResponse(
        status="healthy" if storage_ok else "degraded",
        storage=storage_status,
        content_generation=content_status,
        timestamp=datetime.now(timezone.utc)
    )
