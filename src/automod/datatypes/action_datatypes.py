"""
Result and audit structures produced by the enforcement executor.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from automod.datatypes.automod_datatypes import ActionType, RuleType


@dataclass(slots=True)
class StepResult:
    """Outcome of one side effect in an enforcement pipeline."""

    name: str
    succeeded: bool


@dataclass(frozen=True, slots=True)
class AuditRecord:
    """Structured description of an enforcement, sent to a log channel.

    Attributes:
        guild_id: Community the enforcement happened in.
        rule_type: Rule that triggered.
        action: Action configured on that rule.
        outcome: Human-readable result, e.g. ``"Violation 2 of 3"``.
        user_id: Offending author.
        user_mention: Mention string of the author.
        user_tag: Display name of the author.
        channel_id: Channel the message was posted in.
        content: Offending content, truncated to the audit content limit.
        timestamp: Unix time of the enforcement.
    """

    guild_id: int
    rule_type: RuleType
    action: ActionType
    outcome: str
    user_id: int
    user_mention: str
    user_tag: str
    channel_id: int
    content: str
    timestamp: float


@dataclass(slots=True)
class EnforcementResult:
    """Everything the executor did for one triggered rule."""

    rule_type: RuleType
    action: ActionType
    outcome: str
    steps: List[StepResult] = field(default_factory=list)
    violation_count: Optional[int] = None
    audit_target_id: Optional[int] = None
    audit_sent: bool = False

    def succeeded(self, step_name: str) -> bool:
        """Return True if a step with this name ran and succeeded."""
        return any(step.name == step_name and step.succeeded for step in self.steps)

    def attempted(self, step_name: str) -> bool:
        return any(step.name == step_name for step in self.steps)
