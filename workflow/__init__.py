"""Workflow package: offline request queue, handlers, manager and engine wiring."""

from workflow.callbacks import QueueCallback, LoggingCallback, RichQueueCallback
from workflow.network import NetworkReachabilitySignal, AlwaysOnlineSignal
from workflow.offline_queue import OfflineRequestQueue, RequestHandler
from workflow.handlers import GenerateStoryHandler, NotImplementedHandler, build_handlers
from workflow.narrative_manager import NarrativeEngineManager
from workflow.engine import NarrativeEngine, build_engine

__all__ = [
    "QueueCallback",
    "LoggingCallback",
    "RichQueueCallback",
    "NetworkReachabilitySignal",
    "AlwaysOnlineSignal",
    "OfflineRequestQueue",
    "RequestHandler",
    "GenerateStoryHandler",
    "NotImplementedHandler",
    "build_handlers",
    "NarrativeEngineManager",
    "NarrativeEngine",
    "build_engine",
]
