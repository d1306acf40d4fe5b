"""Sources - endpoints that receive incoming webhooks."""

from typing import Any, Optional

from pydantic import Field

from hookbase_domains.base import (
    Handler,
    HookbaseAdapter,
    RemoteRecord,
    boolean,
    first_present,
    flag,
    number,
    pick,
    string,
)
from hookbase_shared.models import ExecutionContext, ExecutionType


class Source(RemoteRecord):
    id: str
    name: Optional[str] = None
    slug: Optional[str] = None
    provider: Optional[str] = None
    description: Optional[str] = None
    signing_secret: Optional[str] = None
    reject_invalid_signatures: Optional[Any] = None
    rate_limit_per_minute: Optional[Any] = None
    is_active: Optional[Any] = None
    transient_mode: Optional[Any] = None
    transient_mode_camel: Optional[Any] = Field(default=None, alias="transientMode")
    event_count: Optional[Any] = None
    event_count_camel: Optional[Any] = Field(default=None, alias="eventCount")
    route_count: Optional[Any] = None
    route_count_camel: Optional[Any] = Field(default=None, alias="routeCount")
    created_at: Optional[str] = None

    def summary(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "provider": self.provider,
            "isActive": flag(self.is_active),
            "transientMode": first_present(self.transient_mode_camel, default=flag(self.transient_mode)),
            "eventCount": first_present(self.event_count, self.event_count_camel, default=0),
            "routeCount": first_present(self.route_count, self.route_count_camel, default=0),
            "createdAt": self.created_at,
        }

    def detail(self) -> dict[str, Any]:
        summary = self.summary()
        return {
            **{k: summary[k] for k in ("id", "name", "slug", "provider")},
            "description": self.description,
            "signingSecret": self.signing_secret,
            "rejectInvalidSignatures": self.reject_invalid_signatures,
            "rateLimitPerMinute": self.rate_limit_per_minute,
            **{k: summary[k] for k in ("isActive", "transientMode", "eventCount", "routeCount", "createdAt")},
        }

    def created(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "provider": self.provider,
            "signingSecret": self.signing_secret,
        }


SOURCE_FIELDS = {
    "name": "name",
    "description": "description",
    "is_active": "isActive",
    "provider": "provider",
    "reject_invalid_signatures": "rejectInvalidSignatures",
    "rate_limit_per_minute": "rateLimitPerMinute",
    "transient_mode": "transientMode",
}


class SourcesAdapter(HookbaseAdapter):
    """Inbound webhook sources."""

    domain = "sources"

    def _define_tools(self) -> None:
        self._tool(
            "hookbase_list_sources",
            "List all webhook sources in the organization. Sources are endpoints that receive incoming webhooks.",
        )

        self._tool(
            "hookbase_get_source",
            "Get detailed information about a specific webhook source, including its configuration and statistics.",
            {"source_id": string("The ID of the source to retrieve")},
            required=["source_id"],
        )

        self._tool(
            "hookbase_create_source",
            "Create a new webhook source. Sources receive incoming webhooks and can be connected "
            "to destinations via routes.",
            {
                "name": string("Display name for the source"),
                "slug": string('URL-safe identifier (e.g., "github-webhooks")'),
                "provider": string(
                    'Webhook provider for signature verification (e.g., "github", "stripe", "shopify")'
                ),
                "description": string("Optional description of the source"),
                "reject_invalid_signatures": boolean("Whether to reject webhooks with invalid signatures"),
                "rate_limit_per_minute": number("Maximum webhooks per minute (rate limiting)"),
                "transient_mode": boolean(
                    "Enable transient mode - payloads never stored at rest (HIPAA/GDPR compliance). "
                    "Disables replay and payload viewing."
                ),
            },
            required=["name", "slug"],
            execution_type=ExecutionType.WRITE,
        )

        self._tool(
            "hookbase_update_source",
            "Update an existing webhook source configuration.",
            {
                "source_id": string("The ID of the source to update"),
                "name": string("New display name"),
                "description": string("New description"),
                "is_active": boolean("Enable or disable the source"),
                "provider": string("Update webhook provider"),
                "reject_invalid_signatures": boolean("Whether to reject invalid signatures"),
                "rate_limit_per_minute": number("Maximum webhooks per minute"),
                "transient_mode": boolean(
                    "Enable transient mode - payloads never stored at rest (HIPAA/GDPR compliance)"
                ),
            },
            required=["source_id"],
            execution_type=ExecutionType.WRITE,
        )

        self._tool(
            "hookbase_delete_source",
            "Delete a webhook source. This will also delete all associated routes.",
            {"source_id": string("The ID of the source to delete")},
            required=["source_id"],
            execution_type=ExecutionType.WRITE,
        )

    @property
    def handlers(self) -> dict[str, Handler]:
        return {
            "hookbase_list_sources": self._list_sources,
            "hookbase_get_source": self._get_source,
            "hookbase_create_source": self._create_source,
            "hookbase_update_source": self._update_source,
            "hookbase_delete_source": self._delete_source,
        }

    async def fetch_source(self, source_id: str) -> Optional[Source]:
        """Read one source, or None when the API returns no record."""
        data = self._unwrap(await self.client.get(f"/sources/{source_id}"))
        return Source.parse(data.get("source"))

    async def _list_sources(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        data = self._unwrap(await self.client.get("/sources"))
        return {"sources": [s.summary() for s in Source.parse_many(data.get("sources"))]}

    async def _get_source(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        source = await self.fetch_source(args["source_id"])
        return {"source": source.detail() if source else None}

    async def _create_source(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        body = {"name": args["name"], "slug": args["slug"]}
        body.update(pick(args, {
            "description": "description",
            "reject_invalid_signatures": "rejectInvalidSignatures",
            "rate_limit_per_minute": "rateLimitPerMinute",
            "transient_mode": "transientMode",
        }))
        if args.get("provider"):
            body["provider"] = args["provider"]

        data = self._unwrap(await self.client.post("/sources", body))
        source = Source.parse(data.get("source"))
        return {
            "message": "Source created successfully",
            "source": source.created() if source else None,
        }

    async def _update_source(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        body = pick(args, SOURCE_FIELDS)
        data = self._unwrap(await self.client.patch(f"/sources/{args['source_id']}", body))
        return {"message": "Source updated successfully", "source": data.get("source")}

    async def _delete_source(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        self._unwrap(await self.client.delete(f"/sources/{args['source_id']}"))
        return {"message": "Source deleted successfully"}
