from automod.datatypes.automod_datatypes import ActionType, RuleType

ACTION_LABELS = {
    ActionType.WARN: "Warn",
    ActionType.DELETE: "Delete",
    ActionType.WARN_DELETE: "Warn + Delete",
    ActionType.AUTO_MUTE: "Auto Mute",
    ActionType.AUTO_BAN: "Auto Ban",
    ActionType.INSTANT_MUTE: "Instant Mute",
    ActionType.INSTANT_BAN: "Instant Ban",
}


def format_rule_name(rule_type: RuleType | str) -> str:
    """Turn a rule type into a title, e.g. ``fast_message_spam`` -> ``Fast Message Spam``."""
    value = rule_type.value if isinstance(rule_type, RuleType) else str(rule_type)
    return " ".join(word[:1].upper() + word[1:] for word in value.split("_"))


def format_action(action: ActionType | str) -> str:
    """Return the display label of an action, falling back to the raw value."""
    try:
        return ACTION_LABELS[ActionType(action)]
    except ValueError:
        return str(action)


def format_duration(seconds: int) -> str:
    """Compact duration label: 90 -> ``1m``, 3661 -> ``1h``, 90000 -> ``1d``."""
    if seconds < 60:
        return f"{seconds}s"
    if seconds < 3600:
        return f"{seconds // 60}m"
    if seconds < 86400:
        return f"{seconds // 3600}h"
    return f"{seconds // 86400}d"


def truncate(text: str, limit: int, placeholder: str = "*(no text content)*") -> str:
    """Cut ``text`` to ``limit`` characters; empty text becomes ``placeholder``."""
    if not text:
        return placeholder
    return text[:limit]
