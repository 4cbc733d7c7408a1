"""
Automod - rule-based Discord content moderation

Every guild message is checked against that guild's automod rules. Per-user
behaviour is tracked over sliding time windows, and violations are enforced
with warnings, deletions, timeouts and bans.

Core Components:

- **Rule Store**: Per-guild rules, filters, settings, word lists and link
  lists behind an abstract store (SQLite via aiosqlite, or in-memory)
- **Scope Resolver**: Global exemptions plus per-rule role/channel filters
- **Detectors**: One deterministic detector per rule type
- **Sliding-Window Tracker / Violation Accumulator**: Timestamped per-user
  events and violations counted over trailing windows
- **Enforcement Executor**: Ordered, independently caught side effects and
  an audit embed per enforcement
- **Expiry Sweeper**: Background purge of expired tracking data
"""
