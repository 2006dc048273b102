"""
Grid-based marker clustering.

Markers are projected to Web-Mercator pixel coordinates at the current zoom.
Each marker joins the nearest existing cluster whose grid square (centred on
the cluster's first marker, grid_size pixels each way) contains it, otherwise
it starts a new cluster. Clusters holding one marker are returned as plain
markers. At or above max_zoom nothing is clustered.
"""

import math
from app.modules.map.schemas import Cluster, Marker
from typing import Dict, List, Tuple

TILE_SIZE = 256


def project(lat: float, lng: float, zoom: int) -> Tuple[float, float]:
    """(lat, lng) -> world pixel coordinates at zoom"""
    scale = TILE_SIZE * (2 ** zoom)
    siny = math.sin(math.radians(lat))
    siny = min(max(siny, -0.9999), 0.9999)
    x = (lng + 180.0) / 360.0 * scale
    y = (0.5 - math.log((1 + siny) / (1 - siny)) / (4 * math.pi)) * scale
    return x, y


class _Bucket:
    def __init__(self, marker: Marker, point: Tuple[float, float]):
        self.origin = point
        self.markers = [marker]

    def contains(self, point: Tuple[float, float], grid_size: int) -> bool:
        return (abs(point[0] - self.origin[0]) <= grid_size
                and abs(point[1] - self.origin[1]) <= grid_size)

    def distance(self, point: Tuple[float, float]) -> float:
        return math.hypot(point[0] - self.origin[0], point[1] - self.origin[1])


def _summarise(markers: List[Marker]) -> Cluster:
    categories: Dict[str, int] = {}
    quest_count = 0
    for marker in markers:
        for card in marker.quests:
            categories[card.category] = categories.get(card.category, 0) + 1
            quest_count += 1
    return Cluster(
        id="cluster:" + "|".join(m.id for m in markers),
        lat=sum(m.lat for m in markers) / len(markers),
        lng=sum(m.lng for m in markers) / len(markers),
        marker_ids=[m.id for m in markers],
        quest_count=quest_count,
        categories=categories,
    )


def cluster_markers(
    markers: List[Marker],
    zoom: int,
    grid_size: int = 60,
    max_zoom: int = 17,
) -> Tuple[List[Marker], List[Cluster]]:
    """Split markers into (standalone markers, clusters)."""
    if zoom >= max_zoom or len(markers) < 2:
        return list(markers), []

    buckets: List[_Bucket] = []
    for marker in markers:
        point = project(marker.lat, marker.lng, zoom)
        candidates = [b for b in buckets if b.contains(point, grid_size)]
        if candidates:
            min(candidates, key=lambda b: b.distance(point)).markers.append(marker)
        else:
            buckets.append(_Bucket(marker, point))

    singles: List[Marker] = []
    clusters: List[Cluster] = []
    for bucket in buckets:
        if len(bucket.markers) == 1:
            singles.append(bucket.markers[0])
        else:
            clusters.append(_summarise(bucket.markers))
    return singles, clusters
