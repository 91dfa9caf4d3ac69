from abc import ABC, abstractmethod


class EmailServiceBase(ABC):
    @abstractmethod
    async def send_signup_confirmation(
        self,
        to_address: str,
        recipient_name: str,
        confirm_url: str,
    ) -> None:
        pass
