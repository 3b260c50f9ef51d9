"""AI Protocols - Protocol library server for AI coding assistants

Indexes the BRAIN/ protocol documents and answers lookups, keyword and fuzzy
searches, and task-routing requests over Model Context Protocol.
"""

__version__ = "2.0.0"
