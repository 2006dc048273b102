from app.config import settings
from app.modules.map.clustering import cluster_markers
from app.modules.map.markers import build_markers
from app.modules.map.schemas import Camera, MapView
from app.modules.profiles.schemas import ProfileResponse
from app.modules.quests.schemas import QuestResponse
from typing import Dict, List, Optional


class MapRenderer:
    """Turns a quest list into the full marker/cluster set. Always a full rebuild."""

    def __init__(self, grid_size: Optional[int] = None, max_zoom: Optional[int] = None):
        self.grid_size = grid_size or settings.cluster_grid_size
        self.max_zoom = max_zoom or settings.cluster_max_zoom

    def render(
        self,
        quests: List[QuestResponse],
        members_by_quest: Dict[str, List[str]],
        profiles: Dict[str, ProfileResponse],
        current_user_id: str,
        camera: Camera,
    ) -> MapView:
        markers = build_markers(quests, members_by_quest, profiles, current_user_id)
        singles, clusters = cluster_markers(markers, camera.zoom, self.grid_size, self.max_zoom)
        return MapView(camera=camera, markers=singles, clusters=clusters)
