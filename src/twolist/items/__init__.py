"""
Item subsystem.

Components:
- models.py: data structures (Item, RecurringSeries, ListCollections, enums)
- store.py: in-memory ItemStore with change notifications
- api.py: edit-boundary helpers used by front-ends (validation, recommendations)
"""
