from app.config import settings
from app.modules.map.schemas import Camera


class MapCamera:
    """Where the map is looking. Starts on the configured default centre."""

    def __init__(self, lat: float = None, lng: float = None, zoom: int = None):
        self.lat = settings.map_default_lat if lat is None else lat
        self.lng = settings.map_default_lng if lng is None else lng
        self.zoom = settings.map_default_zoom if zoom is None else zoom

    def pan_to(self, lat: float, lng: float) -> None:
        self.lat, self.lng = lat, lng

    def set_zoom(self, level: int) -> None:
        self.zoom = max(0, min(int(level), 21))

    def focus(self, lat: float, lng: float) -> None:
        """Pan to a point and zoom in on it (used after creating a quest)."""
        self.pan_to(lat, lng)
        self.set_zoom(settings.map_focus_zoom)

    def snapshot(self) -> Camera:
        return Camera(lat=self.lat, lng=self.lng, zoom=self.zoom)
