# ==============================
# Orchestrator State
# ==============================
"""
Status groups and fixed vocabularies used by the progress modules.

The enums themselves live in agentrun/contracts; this module re-exports them and
adds the groupings the resolver/aggregator/analyzer reason about.
"""

# ==============================
# Imports
# ==============================
from __future__ import annotations

from typing import FrozenSet

from agentrun.contracts.csi_schema import DEFAULT_TOTAL_STEPS as DEFAULT_TOTAL_STEPS  # re-export
from agentrun.contracts.csi_schema import MessageStatus as MessageStatus  # re-export
from agentrun.contracts.csi_schema import ThreadExecutionStatus as ThreadExecutionStatus  # re-export
from agentrun.contracts.step_schema import StepStatus as StepStatus  # re-export

# ==============================
# Sentinels
# ==============================
COMPLETION_SENTINELS: FrozenSet[str] = frozenset({"final_completion", "enhanced_completion"})

CSI_PENDING = "pending"
CSI_COMPLETED = "completed"

# ==============================
# Status Groups
# ==============================
# Finished, successful or not. Used by is_complete().
STEP_TERMINAL: FrozenSet[StepStatus] = frozenset(
    {
        StepStatus.COMPLETED,
        StepStatus.FAILED,
        StepStatus.SKIPPED,
    }
)

# Counted as done by overall_status(); failed is not.
STEP_DONE: FrozenSet[StepStatus] = frozenset(
    {
        StepStatus.COMPLETED,
        StepStatus.SKIPPED,
    }
)

MESSAGE_ACTIVE: FrozenSet[MessageStatus] = frozenset(
    {
        MessageStatus.RUNNING,
        MessageStatus.PENDING,
    }
)

THREAD_TERMINAL: FrozenSet[ThreadExecutionStatus] = frozenset(
    {
        ThreadExecutionStatus.COMPLETED,
        ThreadExecutionStatus.FAILED,
        ThreadExecutionStatus.CANCELLED,
    }
)

# Agent task statuses share the message vocabulary; cancelled is terminal here.
TASK_TERMINAL: FrozenSet[MessageStatus] = frozenset(
    {
        MessageStatus.COMPLETED,
        MessageStatus.FAILED,
        MessageStatus.CANCELLED,
    }
)

TASK_ACTIVE: FrozenSet[MessageStatus] = MESSAGE_ACTIVE

TASK_PROGRESS = {
    MessageStatus.PENDING: 0,
    MessageStatus.RUNNING: 50,
    MessageStatus.COMPLETED: 100,
    MessageStatus.FAILED: 100,
    MessageStatus.CANCELLED: 0,
}
