"""
Monitor configuration.
"""

import os
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class FailurePolicy(str, Enum):
    """When a recorded resource failure ends a session."""
    # Wait for the root stack to reach a terminal status
    WAIT = "wait"
    # Stop at the first poll that records a failure
    FAIL_FAST = "fail-fast"
    # Stop early only if the root stack has not started the operation yet
    FAIL_BEFORE_START = "fail-before-start"


class MonitorConfig(BaseModel):
    """Settings for one monitoring session."""
    poll_interval_ms: int = Field(default=5000, gt=0, description="Delay between event feed polls")
    verbose: bool = Field(default=False, description="Emit one line per classified event")
    failure_policy: FailurePolicy = Field(default=FailurePolicy.WAIT, description="Early abort policy")

    @property
    def poll_interval_seconds(self) -> float:
        """Poll interval in seconds, as taken by ``time.sleep``."""
        return self.poll_interval_ms / 1000.0

    @classmethod
    def from_env(cls, verbose: Optional[bool] = None) -> "MonitorConfig":
        """
        Build a configuration from ``STACKMON_*`` environment variables.

        Args:
            verbose: Overrides ``STACKMON_VERBOSE`` when given

        Returns:
            MonitorConfig
        """
        values = {}

        interval = os.environ.get("STACKMON_POLL_INTERVAL_MS")
        if interval:
            values["poll_interval_ms"] = int(interval)

        if verbose is not None:
            values["verbose"] = verbose
        elif os.environ.get("STACKMON_VERBOSE"):
            values["verbose"] = os.environ["STACKMON_VERBOSE"].lower() in ("1", "true", "yes")

        policy = os.environ.get("STACKMON_FAILURE_POLICY")
        if policy:
            values["failure_policy"] = FailurePolicy(policy)

        return cls(**values)
