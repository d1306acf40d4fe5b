"""Tunnels - forward webhooks to a local development server."""

from typing import Any, Optional

from hookbase_domains.base import Handler, HookbaseAdapter, RemoteRecord, string
from hookbase_shared.models import ExecutionContext, ExecutionType

CONNECT_INSTRUCTIONS = "Use the Hookbase CLI to connect: hookbase tunnel connect <tunnel-id>"


class Tunnel(RemoteRecord):
    id: str
    name: Optional[str] = None
    subdomain: Optional[str] = None
    status: Optional[str] = None
    total_requests: Optional[Any] = None
    last_connected_at: Optional[str] = None
    created_at: Optional[str] = None

    def summary(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "subdomain": self.subdomain,
            "status": self.status,
            "totalRequests": self.total_requests,
            "lastConnectedAt": self.last_connected_at,
            "createdAt": self.created_at,
        }


class TunnelsAdapter(HookbaseAdapter):
    """Localhost tunnels."""

    domain = "tunnels"

    def _define_tools(self) -> None:
        self._tool(
            "hookbase_list_tunnels",
            "List all localhost tunnels in the organization. Tunnels allow forwarding webhooks to "
            "local development servers.",
        )

        self._tool(
            "hookbase_create_tunnel",
            "Create a new localhost tunnel. The tunnel can be connected using the Hookbase CLI to "
            "forward webhooks to your local server.",
            {
                "name": string("Display name for the tunnel"),
                "subdomain": string("Custom subdomain (auto-generated if not provided)"),
            },
            required=["name"],
            execution_type=ExecutionType.WRITE,
        )

        self._tool(
            "hookbase_get_tunnel_status",
            "Check the connection status of a tunnel. Shows whether the tunnel is connected and live statistics.",
            {"tunnel_id": string("The ID of the tunnel to check")},
            required=["tunnel_id"],
        )

        self._tool(
            "hookbase_delete_tunnel",
            "Delete a localhost tunnel.",
            {"tunnel_id": string("The ID of the tunnel to delete")},
            required=["tunnel_id"],
            execution_type=ExecutionType.WRITE,
        )

    @property
    def handlers(self) -> dict[str, Handler]:
        return {
            "hookbase_list_tunnels": self._list_tunnels,
            "hookbase_create_tunnel": self._create_tunnel,
            "hookbase_get_tunnel_status": self._get_tunnel_status,
            "hookbase_delete_tunnel": self._delete_tunnel,
        }

    async def _list_tunnels(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        data = self._unwrap(await self.client.get("/tunnels"))
        return {"tunnels": [t.summary() for t in Tunnel.parse_many(data.get("tunnels"))]}

    async def _create_tunnel(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        body = {"name": args["name"]}
        if args.get("subdomain") is not None:
            body["subdomain"] = args["subdomain"]

        data = self._unwrap(await self.client.post("/tunnels", body))
        tunnel = Tunnel.parse(data.get("tunnel"))
        return {
            "message": "Tunnel created successfully",
            "tunnel": {
                "id": tunnel.id,
                "name": tunnel.name,
                "subdomain": tunnel.subdomain,
            } if tunnel else None,
            "tunnelUrl": data.get("tunnelUrl"),
            "wsUrl": data.get("wsUrl"),
            "instructions": CONNECT_INSTRUCTIONS,
        }

    async def _get_tunnel_status(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        data = self._unwrap(await self.client.get(f"/tunnels/{args['tunnel_id']}/status"))
        tunnel = Tunnel.parse(data.get("tunnel"))
        if tunnel:
            status = tunnel.summary()
            del status["createdAt"]
        else:
            status = None
        return {"tunnel": status, "liveStatus": data.get("liveStatus")}

    async def _delete_tunnel(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        self._unwrap(await self.client.delete(f"/tunnels/{args['tunnel_id']}"))
        return {"message": "Tunnel deleted successfully"}
