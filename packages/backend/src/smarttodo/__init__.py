"""Smart ToDo — multi-user task tracking API.

Users register, log in for a signed bearer credential, and manage the
tasks they own. Every protected route runs through the authentication
gate; task-scoped routes additionally pass the ownership gate.
"""

__version__ = "1.0.0"
