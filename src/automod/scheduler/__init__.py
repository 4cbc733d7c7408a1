"""
Background tasks.

- **expiry_sweeper.py**: Periodically purges violations and tracked events
  that have aged out of every window.
"""
