from .controller import VideoClockController, check_preconditions
from .device_probe import DeviceProbe, parse_geometry
from .engine import EngineResult, MediaEngine
from .errors import (
    EngineError,
    PlaybackFailure,
    PreconditionError,
    PreprocessError,
    ProbeError,
    ShutdownRequested,
    VideoClockError,
)
from .playback_loop import PlaybackLoop
from .preprocessor import Preprocessor, allocate_artifact_path
from .resource_tracker import ResourceKind, ResourceTracker
from .settings import ClockSettings, OverlayStyle, TimeFormat
from .shutdown_coordinator import ShutdownCoordinator, get_shutdown_coordinator
from .types import Geometry

__all__ = [
    'VideoClockController',
    'check_preconditions',
    'DeviceProbe',
    'parse_geometry',
    'EngineResult',
    'MediaEngine',
    'VideoClockError',
    'PreconditionError',
    'ProbeError',
    'PreprocessError',
    'PlaybackFailure',
    'EngineError',
    'ShutdownRequested',
    'PlaybackLoop',
    'Preprocessor',
    'allocate_artifact_path',
    'ResourceKind',
    'ResourceTracker',
    'ClockSettings',
    'OverlayStyle',
    'TimeFormat',
    'ShutdownCoordinator',
    'get_shutdown_coordinator',
    'Geometry',
]
