"""SmartTodo — multi-user task tracking API.

Users register, log in for a stateless JWT, and manage a private list
of tasks. Every task operation is scoped to the authenticated owner.
"""

__version__ = "0.1.0"
