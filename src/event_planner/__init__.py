"""Smart Event Planner.

Event records and AI-generated content, served from a REST backend when it
is reachable, from the managed relational store otherwise, and from a local
mirror when offline.
"""

__version__ = "0.1.0"
