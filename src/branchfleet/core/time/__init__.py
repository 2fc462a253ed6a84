from branchfleet.core.time.abc import Time
from branchfleet.core.time.real import RealTime

__all__ = ["RealTime", "Time"]
