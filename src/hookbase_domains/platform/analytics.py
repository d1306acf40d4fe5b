"""Analytics - dashboard metrics for the organization."""

from typing import Any, Optional

from hookbase_domains.base import CamelRecord, Handler, HookbaseAdapter, choice, percent
from hookbase_shared.models import ExecutionContext

RANGES = ["1h", "24h", "7d", "30d"]
DEFAULT_RANGE = "24h"


class Overview(CamelRecord):
    total_events: Optional[Any] = None
    total_deliveries: Optional[Any] = None
    successful_deliveries: Optional[Any] = None
    failed_deliveries: Optional[Any] = None
    success_rate: Optional[float] = None
    avg_response_time: Optional[float] = None

    def summary(self) -> dict[str, Any]:
        return {
            "totalEvents": self.total_events,
            "totalDeliveries": self.total_deliveries,
            "successfulDeliveries": self.successful_deliveries,
            "failedDeliveries": self.failed_deliveries,
            "successRate": percent(self.success_rate),
            "avgResponseTime": (
                f"{self.avg_response_time:.0f}ms" if self.avg_response_time is not None else None
            ),
        }


class TopSource(CamelRecord):
    id: str
    name: Optional[str] = None
    slug: Optional[str] = None
    event_count: Optional[Any] = None

    def summary(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "slug": self.slug, "eventCount": self.event_count}


class TopDestination(CamelRecord):
    id: str
    name: Optional[str] = None
    delivery_count: Optional[Any] = None
    success_rate: Optional[float] = None

    def summary(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "deliveryCount": self.delivery_count,
            "successRate": percent(self.success_rate),
        }


class AnalyticsAdapter(HookbaseAdapter):
    """Dashboard analytics."""

    domain = "analytics"

    def _define_tools(self) -> None:
        self._tool(
            "hookbase_get_analytics",
            "Get dashboard analytics and metrics for the organization, including event counts, "
            "delivery success rates, and top sources/destinations.",
            {"range": choice(RANGES, "Time range for analytics (default: 24h)")},
        )

    @property
    def handlers(self) -> dict[str, Handler]:
        return {"hookbase_get_analytics": self._get_analytics}

    async def _get_analytics(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        time_range = args.get("range") or DEFAULT_RANGE
        data = self._unwrap(await self.client.get("/analytics/dashboard", {"range": time_range}))

        overview = Overview.parse(data.get("overview"))
        top_sources = data.get("topSources")
        top_destinations = data.get("topDestinations")
        return {
            "range": time_range,
            "overview": overview.summary() if overview else None,
            "topSources": (
                [s.summary() for s in TopSource.parse_many(top_sources)]
                if top_sources is not None else None
            ),
            "topDestinations": (
                [d.summary() for d in TopDestination.parse_many(top_destinations)]
                if top_destinations is not None else None
            ),
            "eventsByHour": data.get("eventsByHour"),
            "deliveriesByStatus": data.get("deliveriesByStatus"),
        }
