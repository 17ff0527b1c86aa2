"""Endpoints under /api/newsletter."""
from __future__ import annotations

from jobquest.api.base import ApiResource
from jobquest.models import Subscriber


class NewsletterApi(ApiResource):
    prefix = "/api/newsletter"

    def subscribe(self, email: str) -> dict:
        return self.client.post(self.path("subscribe"), {"email": email}, auth=False)

    def subscribers(self) -> tuple[list[Subscriber], int]:
        data = self.client.get(self.path("subscribers")) or {}
        subs = [Subscriber.from_api(s) for s in data.get("subscribers", [])]
        return subs, int(data.get("totalSubscribers", len(subs)))

    def subscriber_count(self) -> int:
        data = self.client.get(self.path("subscribers", "count")) or {}
        return int(data.get("count", 0))

    def unsubscribe(self, email: str) -> dict:
        return self.client.post(self.path("unsubscribe"), {"email": email}, auth=False)

    def delete_subscriber(self, subscriber_id: str) -> dict:
        return self.client.delete(self.path("subscribers", subscriber_id))
