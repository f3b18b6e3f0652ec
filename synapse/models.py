"""Identity and usage records shared by the auth gate, store and API."""
from dataclasses import dataclass


@dataclass(frozen=True)
class Identity:
    """Authenticated caller, resolved once per request."""

    user_id: int
    subscription_tier: str
    email: str | None = None


@dataclass(frozen=True)
class UserStats:
    daily_actions_used: int
    subscription_tier: str

    def to_dict(self) -> dict[str, int | str]:
        return {
            "daily_actions_used": self.daily_actions_used,
            "subscription_tier": self.subscription_tier,
        }
