"""Health check endpoint.

Learn: Open GET endpoint reporting that the server is up. It does not
touch the database, so it stays green while the store is down.
"""

from fastapi import APIRouter

from smarttodo import __version__

router = APIRouter()


@router.get("/health")
async def health_check():
    return {
        "success": True,
        "message": "Smart ToDo API is running",
        "version": __version__,
    }
