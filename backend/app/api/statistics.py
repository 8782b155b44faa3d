"""Learning analytics API.

GET  /api/history                        caller's history, newest first
GET  /api/history/{history_id}           one record, owner only
GET  /api/statistics                     snapshot (recomputed when missing)
GET  /api/statistics/trend?subject_id=   one subject, or all subjects per day
GET  /api/statistics/recommendations
POST /api/statistics/refresh             recompute now
GET  /api/advice                         latest generated advice
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.api.providers import get_statistics_aggregator
from app.core.deps import Requester, get_current_user
from app.core.errors import AccessDeniedError, NotFoundError
from app.models.history import HistoryRecord
from app.models.statistics import (
    AdviceRecord,
    Recommendation,
    TrendPoint,
    UserStatisticsSnapshot,
)
from app.services.history_store import HistoryStore, get_history_store
from app.services.statistics import StatisticsAggregator
from app.services.statistics_store import StatisticsStore, get_statistics_store

logger = logging.getLogger("testcraft.api.statistics")
router = APIRouter(prefix="/api", tags=["statistics"])


@router.get("/history", response_model=list[HistoryRecord])
def list_history(
    requester: Requester = Depends(get_current_user),
    history: HistoryStore = Depends(get_history_store),
):
    return list(reversed(history.list_user(requester.user_id)))


@router.get("/history/{history_id}", response_model=HistoryRecord)
def get_history(
    history_id: str,
    requester: Requester = Depends(get_current_user),
    history: HistoryStore = Depends(get_history_store),
):
    record = history.get(history_id)
    if record is None:
        raise NotFoundError("History", history_id)
    if record.user_id != requester.user_id:
        raise AccessDeniedError("You do not have permission to view this record")
    return record


@router.get("/statistics", response_model=UserStatisticsSnapshot)
def get_statistics(
    requester: Requester = Depends(get_current_user),
    aggregator: StatisticsAggregator = Depends(get_statistics_aggregator),
):
    return aggregator.snapshot(requester.user_id)


@router.get("/statistics/trend", response_model=list[TrendPoint])
def get_trend(
    subject_id: Optional[str] = Query(default=None),
    requester: Requester = Depends(get_current_user),
    aggregator: StatisticsAggregator = Depends(get_statistics_aggregator),
):
    return aggregator.progress_trend(requester.user_id, subject_id)


@router.get("/statistics/recommendations", response_model=list[Recommendation])
def get_recommendations(
    requester: Requester = Depends(get_current_user),
    aggregator: StatisticsAggregator = Depends(get_statistics_aggregator),
):
    return aggregator.recommendations(requester.user_id)


@router.post("/statistics/refresh", response_model=UserStatisticsSnapshot)
def refresh_statistics(
    requester: Requester = Depends(get_current_user),
    aggregator: StatisticsAggregator = Depends(get_statistics_aggregator),
):
    return aggregator.recompute(requester.user_id)


@router.get("/advice", response_model=AdviceRecord)
def get_advice(
    requester: Requester = Depends(get_current_user),
    store: StatisticsStore = Depends(get_statistics_store),
):
    advice = store.get_advice(requester.user_id)
    if advice is None:
        raise NotFoundError("Advice", requester.user_id)
    return advice
