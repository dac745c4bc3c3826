"""
Core - Entity store infrastructure.

- orchestrator.py - EntityStore (read/write/delete-through)
- cache/          - CacheAdapter (size ceiling, ttl, encoding)
- store/          - StoreAdapter (key derivation, zero-key guard)
- interfaces/     - Capability and backend protocols for DI
- connectors/     - Backend implementations (Memory, Redis, SQLite)
- config/         - Settings and factory functions
- monitoring/     - Prometheus metrics
- errors.py       - Error hierarchy
"""
