"""
Core data structures for automod.

- **automod_datatypes.py**: Rule, filter, settings and list entry models plus
  the rule type / action enums and their defaults.
- **message_datatypes.py**: ``InboundMessage``, the platform-neutral snapshot of
  a guild message the engine inspects.
- **action_datatypes.py**: Enforcement results and audit records.
"""
