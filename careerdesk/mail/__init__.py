from .base import MailClient
from .gmail import GmailClient

__all__ = ["MailClient", "GmailClient", "gmail_client_factory"]


def gmail_client_factory(access_token: str) -> MailClient:
    return GmailClient(access_token)
