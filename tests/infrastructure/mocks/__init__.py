from .fake_engine import (
    PROBE_OUTPUT_1080P,
    EngineCall,
    FakeEngine,
    ScriptedRun,
    artifact_in,
    write_artifact,
)

__all__ = [
    "EngineCall",
    "FakeEngine",
    "PROBE_OUTPUT_1080P",
    "ScriptedRun",
    "artifact_in",
    "write_artifact",
]
