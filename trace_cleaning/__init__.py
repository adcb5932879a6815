"""GPS trace cleaning: noise filtering, smoothing and road snapping."""

from trace_cleaning.cache import ResultCache
from trace_cleaning.decimation import decimate
from trace_cleaning.geo import distance_meters
from trace_cleaning.models import PipelineOptions, PipelineResult, Point, Trace
from trace_cleaning.noise_filter import NoiseFilterResult, filter_noise
from trace_cleaning.pipeline import TracePipeline, validate_points
from trace_cleaning.road_snapper import RoadSnapper, SnapResult
from trace_cleaning.smoothing import smooth
from trace_cleaning.storage import TraceStore

__all__ = [
    "NoiseFilterResult",
    "PipelineOptions",
    "PipelineResult",
    "Point",
    "ResultCache",
    "RoadSnapper",
    "SnapResult",
    "Trace",
    "TracePipeline",
    "TraceStore",
    "decimate",
    "distance_meters",
    "filter_noise",
    "smooth",
    "validate_points",
]
