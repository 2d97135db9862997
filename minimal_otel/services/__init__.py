"""Services - Background heartbeat and shutdown coordination"""
from .heartbeat import HEARTBEAT_TEMPLATE, HeartbeatTask
from .lifecycle import STOPPING_MESSAGE, ShutdownCoordinator

__all__ = ["HEARTBEAT_TEMPLATE", "HeartbeatTask", "STOPPING_MESSAGE", "ShutdownCoordinator"]
