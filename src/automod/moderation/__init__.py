"""
Automod rule evaluation and enforcement.

- **automod_engine.py**: Per-message entry point, first matching rule wins
- **scope_resolver.py**: Exemptions and rule filters
- **detectors.py** / **content_checks.py**: Rule type detectors
- **window_tracker.py**: Sliding-window event counting
- **violation_accumulator.py**: Violation counting for auto_mute / auto_ban
- **enforcement.py** / **audit_embed.py**: Action pipelines and audit embeds
"""
