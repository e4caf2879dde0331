from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class ResourceStatus(str, Enum):
    """Three-state fetch cycle."""
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class FetchState:
    """Snapshot of one resource container: data, loading flag and error message"""
    data: Any = None
    loading: bool = True
    error: Optional[str] = None
    updated_at: Optional[datetime] = None  # time of the last successful fetch

    @property
    def status(self) -> ResourceStatus:
        if self.loading:
            return ResourceStatus.LOADING
        if self.error is not None:
            return ResourceStatus.ERROR
        return ResourceStatus.SUCCESS
