"""
Code Tickets

Record service for code work items with:
- Immutable authorship
- Author-only edit and delete
- Assignee status/comment updates
- Keyword, status and priority search
"""

__version__ = "0.1.0"
