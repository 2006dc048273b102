from fastapi import APIRouter, Depends
from app.modules.geocoding.schemas import AutocompleteResponse
from app.modules.geocoding.service import GeocodingService
from app.core.dependencies import get_current_user_id
from typing import Dict, Optional

router = APIRouter(prefix="/geocoding", tags=["geocoding"])

_geocoding_service: Optional[GeocodingService] = None


def get_geocoding_service() -> GeocodingService:
    global _geocoding_service
    if _geocoding_service is None:
        _geocoding_service = GeocodingService()
    return _geocoding_service


def close_geocoding_service() -> None:
    global _geocoding_service
    if _geocoding_service is not None:
        _geocoding_service.close()
        _geocoding_service = None


@router.get("/autocomplete", response_model=AutocompleteResponse)
async def autocomplete(
    q: str = "",
    region: Optional[str] = None,
    user_data: Dict = Depends(get_current_user_id),
    service: GeocodingService = Depends(get_geocoding_service)
):
    """Location suggestions for the quest location field. Errors degrade to an empty list."""
    return AutocompleteResponse(query=q, suggestions=service.autocomplete(q, region))
