from abc import ABC, abstractmethod


class MailClient(ABC):
    @abstractmethod
    def search(self, query: str, max_results: int = 50) -> list[str]:
        """Return the ids of messages matching *query*."""

    @abstractmethod
    def get_message(self, message_id: str) -> dict:
        """Return the full message resource (headers + payload)."""

    def close(self) -> None:
        """Release any connections held by the client."""
