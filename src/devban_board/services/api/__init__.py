"""Remote API clients."""

from devban_board.services.api.client import FirestoreClient, get_client

__all__ = ["FirestoreClient", "get_client"]
