"""
FastAPI dependency providers.

Routers receive every service through Depends() so tests can swap any of
them with app.dependency_overrides.
"""
from functools import lru_cache

from fastapi import Depends

from app.core.config import get_settings
from app.core.difficulty import DifficultyCatalog, default_catalog
from app.services.advice import AdviceGenerator
from app.services.ai import get_ai_service
from app.services.background import GENERATE_ADVICE, UPDATE_STATISTICS, BackgroundJobQueue
from app.services.catalog import TopicCatalog, get_topic_catalog
from app.services.history_store import HistoryStore, get_history_store
from app.services.progress_store import ProgressStore, get_progress_store
from app.services.progress_tracker import ProgressTracker
from app.services.scoring import ScoringEngine
from app.services.statistics import StatisticsAggregator
from app.services.statistics_store import StatisticsStore, get_statistics_store
from app.services.test_generator import RegenerationCoordinator, TestGenerationService
from app.services.test_repository import TestRepository
from app.services.test_store import get_test_store


@lru_cache
def get_difficulty_catalog() -> DifficultyCatalog:
    return default_catalog()


def get_test_repository() -> TestRepository:
    return TestRepository(get_test_store())


def get_generation_service(
    catalog: DifficultyCatalog = Depends(get_difficulty_catalog),
    topics: TopicCatalog = Depends(get_topic_catalog),
    repository: TestRepository = Depends(get_test_repository),
) -> TestGenerationService:
    settings = get_settings()
    coordinator = RegenerationCoordinator(
        get_ai_service(),
        max_attempts=settings.generation_max_attempts,
        acceptance_ratio=settings.generation_acceptance_ratio,
    )
    return TestGenerationService(coordinator, catalog, topics, repository)


def get_progress_tracker(
    repository: TestRepository = Depends(get_test_repository),
    store: ProgressStore = Depends(get_progress_store),
) -> ProgressTracker:
    return ProgressTracker(repository, store)


def get_statistics_aggregator(
    history: HistoryStore = Depends(get_history_store),
    store: StatisticsStore = Depends(get_statistics_store),
    repository: TestRepository = Depends(get_test_repository),
    topics: TopicCatalog = Depends(get_topic_catalog),
) -> StatisticsAggregator:
    return StatisticsAggregator(history, store, repository, topics)


def _generate_advice(user_id: str, history_id: str) -> None:
    generator = AdviceGenerator(
        get_ai_service(), get_history_store(), get_statistics_store(), get_test_repository()
    )
    generator.generate(user_id, history_id)


def _update_statistics(user_id: str) -> None:
    StatisticsAggregator(
        get_history_store(), get_statistics_store(), get_test_repository(), get_topic_catalog()
    ).recompute(user_id)


def get_job_queue() -> BackgroundJobQueue:
    queue = BackgroundJobQueue(max_attempts=get_settings().background_max_attempts)
    queue.register(GENERATE_ADVICE, _generate_advice)
    queue.register(UPDATE_STATISTICS, _update_statistics)
    return queue


def get_scoring_engine(
    repository: TestRepository = Depends(get_test_repository),
    topics: TopicCatalog = Depends(get_topic_catalog),
    history: HistoryStore = Depends(get_history_store),
    progress: ProgressStore = Depends(get_progress_store),
    jobs: BackgroundJobQueue = Depends(get_job_queue),
) -> ScoringEngine:
    return ScoringEngine(repository, topics, history, progress, jobs)
