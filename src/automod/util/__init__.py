"""
Utility functions and helpers for automod.

- **logger.py**: Centralized logging configuration with colored console output,
  rotating file handlers and per-session log files. Uses prompt_toolkit for
  non-blocking console I/O.

- **format_utils.py**: Display names for rule types and actions, durations and
  content truncation for audit embeds.

- **keyed_lock.py**: Per-key asyncio locks for atomic append-then-count.
"""
