"""
Marathon Event API — Application Package
==========================================

Layered layout:

    ┌─────────────────────────────────────┐
    │   Routes (route table + handlers)   │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (business logic)         │  ← queries, counter side effect
    ├─────────────────────────────────────┤
    │   Schemas (Pydantic contracts)      │  ← request validation, responses
    ├─────────────────────────────────────┤
    │   Database (StoreClient, Motor)     │  ← marathons, registrations, tips
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
