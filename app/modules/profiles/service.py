from supabase import Client
from app.modules.profiles.schemas import ProfileResponse
from typing import Dict, Iterable, List, Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)

GENDER_BUCKETS = ("male", "female", "other", "unspecified")


class ProfileService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_profile(self, user_id: str) -> ProfileResponse:
        """Get profile by user ID"""
        try:
            result = self.supabase.table("profiles")\
                .select("*")\
                .eq("id", user_id)\
                .maybe_single()\
                .execute()

            if not result or not result.data:
                raise HTTPException(status_code=404, detail="Profile not found")

            return ProfileResponse(**result.data)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_profiles(self, user_ids: Iterable[str]) -> Dict[str, ProfileResponse]:
        """Map user_id -> profile. Users without a profile row are omitted."""
        ids = sorted(set(user_ids))
        if not ids:
            return {}
        try:
            result = self.supabase.table("profiles")\
                .select("*")\
                .in_("id", ids)\
                .execute()
            return {p["id"]: ProfileResponse(**p) for p in (result.data or [])}
        except Exception as e:
            # Names are cosmetic on markers; render without them
            logger.warning(f"Error loading profiles: {e}")
            return {}


def display_name(profiles: Dict[str, ProfileResponse], user_id: str) -> str:
    profile = profiles.get(user_id)
    return profile.name if profile else "Anonymous"


def gender_composition(profiles: Dict[str, ProfileResponse], user_ids: List[str]) -> Dict[str, int]:
    """Count members per gender bucket; missing profiles or gender count as unspecified."""
    counts = {bucket: 0 for bucket in GENDER_BUCKETS}
    for user_id in user_ids:
        profile: Optional[ProfileResponse] = profiles.get(user_id)
        gender = profile.gender if profile and profile.gender else "unspecified"
        counts[gender] += 1
    return counts
