"""Credential loading and feed access for the GitHub events API"""

from event_sync.ingestion.credentials import CredentialStore, Credentials
from event_sync.ingestion.github_client import GitHubEventsClient

__all__ = ["CredentialStore", "Credentials", "GitHubEventsClient"]
