"""
Engines run by tick(now), in this order:

- scheduler.py: promotes deferred items, orchestrates tick, background ticker
- recurrence.py: next occurrence, generate-or-remind per series
- aging.py: monthly priority escalation
- selection.py: sort order, recommendations, dependency unblocking
"""
