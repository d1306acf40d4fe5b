"""Cron jobs - scheduled HTTP requests."""

from typing import Any, Optional

from hookbase_domains.base import (
    HTTP_METHODS,
    CamelRecord,
    Handler,
    HookbaseAdapter,
    RemoteRecord,
    choice,
    flag,
    number,
    string,
    string_map,
    url,
)
from hookbase_shared.models import ExecutionContext, ExecutionType

DEFAULT_TIMEZONE = "UTC"
DEFAULT_TIMEOUT_MS = 30000


class CronJob(RemoteRecord):
    id: str
    name: Optional[str] = None
    description: Optional[str] = None
    cron_expression: Optional[str] = None
    timezone: Optional[str] = None
    url: Optional[str] = None
    method: Optional[str] = None
    is_active: Optional[Any] = None
    last_run_at: Optional[str] = None
    next_run_at: Optional[str] = None
    consecutive_failures: Optional[Any] = None
    created_at: Optional[str] = None

    def summary(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "cronExpression": self.cron_expression,
            "timezone": self.timezone,
            "url": self.url,
            "method": self.method,
            "isActive": flag(self.is_active),
            "lastRunAt": self.last_run_at,
            "nextRunAt": self.next_run_at,
            "consecutiveFailures": self.consecutive_failures or 0,
            "createdAt": self.created_at,
        }


class CronExecution(CamelRecord):
    id: str
    status: Optional[str] = None
    response_status: Optional[Any] = None
    latency_ms: Optional[Any] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == "success"

    def summary(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "status": self.status,
            "responseStatus": self.response_status,
            "latencyMs": self.latency_ms,
            "error": self.error,
        }


class CronAdapter(HookbaseAdapter):
    """Scheduled cron jobs."""

    domain = "cron"

    def _define_tools(self) -> None:
        self._tool(
            "hookbase_list_cron_jobs",
            "List all scheduled cron jobs in the organization. Cron jobs make HTTP requests on a schedule.",
        )

        self._tool(
            "hookbase_create_cron_job",
            "Create a new scheduled cron job that makes HTTP requests on a schedule.",
            {
                "name": string("Display name for the cron job"),
                "cron_expression": string(
                    'Cron expression (e.g., "0 * * * *" for hourly, "0 0 * * *" for daily)'
                ),
                "url": url("URL to request when the job runs"),
                "method": choice(HTTP_METHODS, "HTTP method (default: POST)"),
                "headers": string_map("Custom headers to include"),
                "payload": string("Request body (for POST/PUT/PATCH)"),
                "timezone": string("Timezone for the schedule (default: UTC)"),
                "timeout_ms": number("Request timeout in milliseconds (default: 30000)"),
                "description": string("Optional description"),
            },
            required=["name", "cron_expression", "url"],
            execution_type=ExecutionType.WRITE,
        )

        self._tool(
            "hookbase_delete_cron_job",
            "Delete a scheduled cron job.",
            {"job_id": string("The ID of the cron job to delete")},
            required=["job_id"],
            execution_type=ExecutionType.WRITE,
        )

        self._tool(
            "hookbase_trigger_cron",
            "Manually trigger a cron job immediately, regardless of its schedule.",
            {"job_id": string("The ID of the cron job to trigger")},
            required=["job_id"],
            execution_type=ExecutionType.WRITE,
        )

    @property
    def handlers(self) -> dict[str, Handler]:
        return {
            "hookbase_list_cron_jobs": self._list_cron_jobs,
            "hookbase_create_cron_job": self._create_cron_job,
            "hookbase_delete_cron_job": self._delete_cron_job,
            "hookbase_trigger_cron": self._trigger_cron,
        }

    async def _list_cron_jobs(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        data = self._unwrap(await self.client.get("/cron"))
        return {"cronJobs": [j.summary() for j in CronJob.parse_many(data.get("cronJobs"))]}

    async def _create_cron_job(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        body = {
            "name": args["name"],
            "description": args.get("description"),
            "cronExpression": args["cron_expression"],
            "timezone": args.get("timezone") or DEFAULT_TIMEZONE,
            "url": args["url"],
            "method": args.get("method") or "POST",
            "headers": args.get("headers"),
            "payload": args.get("payload"),
            "timeoutMs": args.get("timeout_ms") or DEFAULT_TIMEOUT_MS,
        }
        body = {k: v for k, v in body.items() if v is not None}

        data = self._unwrap(await self.client.post("/cron", body))
        job = CronJob.parse(data.get("cronJob"))
        return {
            "message": "Cron job created successfully",
            "cronJob": {
                "id": job.id,
                "name": job.name,
                "cronExpression": job.cron_expression,
                "url": job.url,
                "nextRunAt": job.next_run_at,
            } if job else None,
        }

    async def _delete_cron_job(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        self._unwrap(await self.client.delete(f"/cron/{args['job_id']}"))
        return {"message": "Cron job deleted successfully"}

    async def _trigger_cron(self, args: dict[str, Any], context: ExecutionContext) -> dict[str, Any]:
        data = self._unwrap(await self.client.post(f"/cron/{args['job_id']}/trigger"))
        execution = CronExecution.parse(data.get("execution"))
        succeeded = execution is not None and execution.succeeded
        return {
            "message": "Cron job executed successfully" if succeeded else "Cron job execution failed",
            "execution": execution.summary() if execution else None,
        }
