"""
Enforcement executor: turns a triggered rule into platform side effects.

Each action maps to an ordered pipeline of steps (warn, delete, record,
mute, ban, audit). Steps are awaited one at a time and each is caught on
its own, so a failed delete never prevents the mute that follows it and
nothing raises back into the engine.
"""

from __future__ import annotations

import time
from typing import Awaitable, Callable, Optional

from automod.configuration.app_configuration import AutomodConfig
from automod.datatypes.action_datatypes import AuditRecord, EnforcementResult, StepResult
from automod.datatypes.automod_datatypes import ActionType, AutomodSettings, Rule
from automod.datatypes.message_datatypes import InboundMessage
from automod.moderation.violation_accumulator import ViolationAccumulator
from automod.platform.gateway import PlatformGateway
from automod.util.format_utils import format_rule_name, truncate
from automod.util.logger import get_logger

logger = get_logger("enforcement")

MUTE_REASON = "Automod violation"

STEP_WARN = "warn"
STEP_DELETE = "delete"
STEP_RECORD = "record_violation"
STEP_MUTE = "mute"
STEP_BAN = "ban"
STEP_AUDIT = "audit"


def default_warning(message: InboundMessage, rule: Rule) -> str:
    return f"{message.author_mention}, your message violated the {format_rule_name(rule.rule_type)} rule."


def ban_reason(rule: Rule) -> str:
    return f"Automod: {format_rule_name(rule.rule_type)}"


class EnforcementExecutor:
    """Runs the step pipeline for a rule's action and emits the audit record."""

    def __init__(
        self,
        gateway: PlatformGateway,
        accumulator: ViolationAccumulator,
        config: AutomodConfig | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._gateway = gateway
        self._accumulator = accumulator
        self._config = config or AutomodConfig()
        self._clock = clock

    async def execute(
        self,
        message: InboundMessage,
        rule: Rule,
        settings: AutomodSettings,
    ) -> EnforcementResult:
        """
        Apply ``rule.action`` to ``message`` and send the audit record.

        Args:
            message: The offending message.
            rule: The rule that triggered.
            settings: Community settings, used for the default log channel.

        Returns:
            EnforcementResult: Steps taken, the outcome string and audit routing.
        """
        result = EnforcementResult(rule_type=rule.rule_type, action=rule.action, outcome="")

        match rule.action:
            case ActionType.WARN:
                await self._warn(result, message, rule)
                result.outcome = "Warned"

            case ActionType.DELETE:
                deleted = await self._delete(result, message)
                result.outcome = "Deleted" if deleted else "Delete failed"

            case ActionType.WARN_DELETE:
                await self._warn(result, message, rule)
                await self._delete(result, message)
                result.outcome = "Warned + Deleted"

            case ActionType.AUTO_MUTE | ActionType.AUTO_BAN:
                await self._escalate(result, message, rule)

            case ActionType.INSTANT_MUTE:
                await self._delete(result, message)
                muted = await self._mute(result, message, rule)
                result.outcome = "Deleted + Muted" if muted else "Deleted (mute failed)"

            case ActionType.INSTANT_BAN:
                await self._delete(result, message)
                banned = await self._ban(result, message, rule)
                result.outcome = "Deleted + Banned" if banned else "Deleted (ban failed)"

        logger.info(
            "[ENFORCEMENT] %s on user %s in guild %s for %s: %s",
            rule.action.value, message.author_id, message.guild_id, rule.rule_type.value, result.outcome,
        )

        await self._audit(result, message, rule, settings)
        return result

    # ------------------------------------------------------------------
    # Escalating actions
    # ------------------------------------------------------------------

    async def _escalate(self, result: EnforcementResult, message: InboundMessage, rule: Rule) -> None:
        await self._delete(result, message)

        count = await self._run_step(
            result,
            STEP_RECORD,
            lambda: self._accumulator.record_and_count(message.guild_id, message.author_id, rule.rule_type),
        )
        if count is None:
            result.outcome = "Deleted (violation tracking failed)"
            return

        result.violation_count = count
        required = rule.resolved_violations_required()
        if count < required:
            result.outcome = f"Violation {count} of {required}"
            return

        if rule.action is ActionType.AUTO_MUTE:
            muted = await self._mute(result, message, rule)
            result.outcome = f"Auto-muted ({count} violations)" if muted else "Mute failed"
        else:
            banned = await self._ban(result, message, rule)
            result.outcome = f"Auto-banned ({count} violations)" if banned else "Ban failed"

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def _warn(self, result: EnforcementResult, message: InboundMessage, rule: Rule) -> bool:
        text = rule.custom_message or default_warning(message, rule)
        delay = self._config.warning_delete_after_seconds
        return bool(
            await self._run_step(
                result, STEP_WARN, lambda: self._gateway.send_ephemeral_notice(message, text, delay)
            )
        )

    async def _delete(self, result: EnforcementResult, message: InboundMessage) -> bool:
        return bool(await self._run_step(result, STEP_DELETE, lambda: self._gateway.delete_message(message)))

    async def _mute(self, result: EnforcementResult, message: InboundMessage, rule: Rule) -> bool:
        seconds = rule.resolved_mute_duration()
        return bool(
            await self._run_step(
                result, STEP_MUTE, lambda: self._gateway.timeout_member(message, seconds, MUTE_REASON)
            )
        )

    async def _ban(self, result: EnforcementResult, message: InboundMessage, rule: Rule) -> bool:
        reason = ban_reason(rule)
        return bool(await self._run_step(result, STEP_BAN, lambda: self._gateway.ban_member(message, reason)))

    async def _audit(
        self,
        result: EnforcementResult,
        message: InboundMessage,
        rule: Rule,
        settings: AutomodSettings,
    ) -> None:
        target = rule.log_channel_id or settings.default_log_channel_id
        if target is None:
            logger.debug("[ENFORCEMENT] No log channel for guild %s; audit dropped", message.guild_id)
            return

        record = AuditRecord(
            guild_id=message.guild_id,
            rule_type=rule.rule_type,
            action=rule.action,
            outcome=result.outcome,
            user_id=message.author_id,
            user_mention=message.author_mention,
            user_tag=message.author_tag,
            channel_id=message.channel_id,
            content=truncate(message.content, self._config.audit_content_limit),
            timestamp=self._clock(),
        )
        result.audit_target_id = target
        result.audit_sent = bool(
            await self._run_step(
                result, STEP_AUDIT, lambda: self._gateway.send_audit_embed(message.guild_id, target, record)
            )
        )

    async def _run_step(
        self,
        result: EnforcementResult,
        name: str,
        step: Callable[[], Awaitable[object]],
    ) -> Optional[object]:
        """Await one step, recording success; exceptions are logged and yield None."""
        try:
            value = await step()
        except Exception:
            logger.exception("[ENFORCEMENT] Step '%s' raised", name)
            result.steps.append(StepResult(name=name, succeeded=False))
            return None

        succeeded = value is not False and value is not None
        result.steps.append(StepResult(name=name, succeeded=succeeded))
        return value
