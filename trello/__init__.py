"""Trello REST collaborator."""

from .client import TrelloClient, get_trello_client

__all__ = ["TrelloClient", "get_trello_client"]
