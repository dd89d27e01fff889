from abc import ABC, abstractmethod


class IntentBackend(ABC):
    @abstractmethod
    async def classify(self, system_prompt: str, command: str) -> dict:
        """Return the backend's structured intent guess as a JSON object.

        Raises CapabilityError on any transport, timeout or parse failure.
        """
        ...

    async def close(self) -> None:
        """Release any underlying resources."""
