"""
EventSync: derived-entity synchronization and grouped archive queries for
event content.
"""

__version__ = "0.1.0"
