from offload_monitor.api import dashboard, status, system

__all__ = ["dashboard", "status", "system"]
