from fastapi import APIRouter, Depends
from app.modules.questbook.schemas import QuotesResponse, ReflectionResponse
from app.modules.questbook.service import DailyContentService
from app.core.dependencies import get_current_user_id
from typing import Dict, Optional

router = APIRouter(prefix="/questbook", tags=["questbook"])

_daily_content_service: Optional[DailyContentService] = None


def get_daily_content_service() -> DailyContentService:
    # One instance so the per-day cache is shared across requests
    global _daily_content_service
    if _daily_content_service is None:
        _daily_content_service = DailyContentService()
    return _daily_content_service


def close_daily_content_service() -> None:
    global _daily_content_service
    if _daily_content_service is not None:
        _daily_content_service.close()
        _daily_content_service = None


@router.get("/quotes", response_model=QuotesResponse)
async def daily_quotes(
    user_data: Dict = Depends(get_current_user_id),
    service: DailyContentService = Depends(get_daily_content_service)
):
    """Today's motivation quotes (built-in list when the generator is unavailable)"""
    return service.get_quotes()


@router.get("/reflection", response_model=ReflectionResponse)
async def daily_reflection(
    category: str = "stressed",
    user_data: Dict = Depends(get_current_user_id),
    service: DailyContentService = Depends(get_daily_content_service)
):
    """Today's reflection question for stressed | burnout | sleep"""
    return service.get_reflection(category)
