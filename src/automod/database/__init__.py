"""
Persistence for automod.

Public API:
    - AutomodStore: Abstract store interface used by the engine
    - SQLiteAutomodStore: aiosqlite-backed implementation
    - InMemoryAutomodStore: dictionary-backed implementation
    - StoreError: Raised by stores when the backend fails
"""
