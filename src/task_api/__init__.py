"""
Task API package.

Per-user task list service: FastAPI routes over an owner-scoped SQLite
repository. Build an application with ``task_api.main.create_app``.
"""

__version__ = "0.1.0"
