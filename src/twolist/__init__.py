"""twolist: two curated lists (tasks / ideas) with recurring series, priority aging and deferred scheduling."""

__version__ = "0.1.0"
