"""Prompt catalogue for the Hookbase MCP Server.

Static guidance that helps an assistant use the Hookbase tools. Rendering a
prompt never calls the API.
"""

import time
from typing import Any, Callable, Optional

from hookbase_shared.errors import PromptError
from hookbase_shared.models import PromptArgument, PromptDefinition
from hookbase_shared.schema import create_tool_schema, validate_schema

Renderer = Callable[[dict[str, str]], str]


OVERVIEW_TEXT = """# Hookbase MCP Server

Hookbase is a webhook management platform with two main capabilities:

## 1. Inbound Webhooks (Receiving)
Receive webhooks from external services (Stripe, GitHub, etc.) and route them to your destinations.

**Key concepts:**
- **Sources**: Endpoints that receive incoming webhooks (e.g., stripe-webhooks, github-events)
- **Destinations**: Where webhooks are forwarded to (your API endpoints)
- **Routes**: Connect sources to destinations with optional filtering and transformation
- **Events**: Individual webhook requests received
- **Deliveries**: Attempts to forward events to destinations

**Common workflows:**
- Create a source → Create a destination → Create a route connecting them
- Monitor events and deliveries for failures
- Replay failed deliveries

## 2. Outbound Webhooks (Sending)
Send webhooks to your customers' endpoints with built-in retries, signatures, and circuit breakers.

**Key concepts:**
- **Applications**: Represent a customer or integration receiving your webhooks
- **Endpoints**: URLs where webhooks are delivered (belong to an application)
- **Event Types**: Define the kinds of events you send (e.g., order.created, payment.completed)
- **Subscriptions**: Connect endpoints to event types they want to receive
- **Messages**: Individual delivery records tracking success/failure

**Typical setup flow:**
1. Create event types that define your webhook events
2. Create an application for each customer
3. Add endpoints to the application (save the signing secret!)
4. Subscribe endpoints to relevant event types
5. Send events using hookbase_send_event

**Circuit breaker states:**
- `closed`: Normal operation, deliveries proceed
- `open`: Too many failures, deliveries paused
- `half_open`: Testing if endpoint recovered

Use `hookbase_reset_endpoint_circuit` to manually reset after fixing issues.

## Tool Naming Convention
All tools use `hookbase_verb_noun` format:
- `hookbase_list_*` - List resources
- `hookbase_get_*` - Get single resource details
- `hookbase_create_*` - Create new resource
- `hookbase_update_*` - Update existing resource
- `hookbase_delete_*` - Delete resource"""


def _overview(args: dict[str, str]) -> str:
    return OVERVIEW_TEXT


def _outbound_webhook_setup(args: dict[str, str]) -> str:
    return f"""Set up outbound webhooks for a customer with these details:

Customer: {args['customer_name']}
Webhook URL: {args['webhook_url']}
Event types: {args.get('event_types') or '[all available event types]'}

Follow these steps:
1. First, check if the required event types exist using hookbase_list_event_types
2. Create any missing event types using hookbase_create_event_type
3. Create a webhook application using hookbase_create_application
4. Create an endpoint using hookbase_create_endpoint (IMPORTANT: Save the signing secret!)
5. Create subscriptions for each event type using hookbase_create_subscription

After setup, provide the customer with:
- Their signing secret (from endpoint creation)
- The event types they're subscribed to
- Instructions to verify webhook signatures"""


def _debug_failed_deliveries(args: dict[str, str]) -> str:
    return f"""Help me debug failed webhook deliveries.

Direction: {args.get('direction') or 'both inbound and outbound'}

## For Inbound Webhooks (receiving):
1. Use hookbase_list_deliveries with status='failed' to find failures
2. Use hookbase_get_delivery to see error details and response
3. Common issues:
   - Destination URL unreachable → Check destination configuration
   - 4xx/5xx responses → Check destination logs
   - Timeout → Increase destination timeout or optimize endpoint
4. Use hookbase_replay_delivery to retry after fixing
5. Use hookbase_bulk_replay to retry multiple failures

## For Outbound Webhooks (sending):
1. Use hookbase_list_outbound_messages with status='failed' or status='exhausted'
2. Use hookbase_get_outbound_message to see error details
3. Use hookbase_get_message_attempts to see all delivery attempts
4. Check circuit breaker: hookbase_get_endpoint to see circuitState
5. Common issues:
   - Circuit breaker open → Use hookbase_reset_endpoint_circuit after fixing
   - Endpoint disabled → Use hookbase_update_endpoint to re-enable
   - URL changed → Update endpoint URL
6. Use hookbase_replay_message to retry failed messages

## Get Statistics:
- Inbound: hookbase_get_analytics
- Outbound: hookbase_get_outbound_stats"""


def _send_test_event(args: dict[str, str]) -> str:
    event_type = args["event_type"]
    application_id = args.get("application_id")
    target = f" to application {application_id}" if application_id else ""
    application_line = f'- application_id: "{application_id}"' if application_id else ""
    test_key = f"test-{int(time.time() * 1000)}"

    return f"""Send a test {event_type} event{target}.

Use hookbase_send_event with:
- event_type: "{event_type}"
- payload: A sample payload appropriate for this event type
{application_line}
- idempotency_key: A unique key like "{test_key}"

After sending:
1. Note the eventId and messagesQueued count
2. Use hookbase_list_outbound_messages to track delivery status
3. If any fail, use hookbase_get_message_attempts to see details"""


PROMPTS: list[tuple[PromptDefinition, Renderer]] = [
    (
        PromptDefinition(
            name="hookbase_overview",
            description="Overview of Hookbase capabilities and how to use the MCP tools",
        ),
        _overview,
    ),
    (
        PromptDefinition(
            name="outbound_webhook_setup",
            description="Step-by-step guide to set up outbound webhooks for a new customer",
            arguments=[
                PromptArgument(
                    name="customer_name",
                    description="Name of the customer to set up webhooks for",
                    required=True,
                ),
                PromptArgument(
                    name="webhook_url",
                    description="The customer's webhook endpoint URL",
                    required=True,
                ),
                PromptArgument(
                    name="event_types",
                    description=(
                        "Comma-separated list of event types to subscribe "
                        "(e.g., order.created,payment.completed)"
                    ),
                ),
            ],
        ),
        _outbound_webhook_setup,
    ),
    (
        PromptDefinition(
            name="debug_failed_deliveries",
            description="Guide to diagnose and fix failed webhook deliveries",
            arguments=[
                PromptArgument(
                    name="direction",
                    description="Which direction to debug",
                    enum=["inbound", "outbound", "both"],
                ),
            ],
        ),
        _debug_failed_deliveries,
    ),
    (
        PromptDefinition(
            name="send_test_event",
            description="Send a test webhook event to verify setup",
            arguments=[
                PromptArgument(
                    name="event_type",
                    description="Event type name (e.g., order.created)",
                    required=True,
                ),
                PromptArgument(
                    name="application_id",
                    description="Target specific application (optional)",
                ),
            ],
        ),
        _send_test_event,
    ),
]


def argument_schema(prompt: PromptDefinition) -> dict[str, Any]:
    """Closed JSON schema for a prompt's arguments."""
    return create_tool_schema(
        [
            {"name": arg.name, "type": "string", "description": arg.description, "enum": arg.enum}
            for arg in prompt.arguments
        ],
        required=[arg.name for arg in prompt.arguments if arg.required],
    )


class PromptCatalog:
    """Lookup and rendering of the static prompts."""

    def __init__(self, prompts: Optional[list[tuple[PromptDefinition, Renderer]]] = None) -> None:
        self._prompts = {
            definition.name: (definition, renderer)
            for definition, renderer in (prompts if prompts is not None else PROMPTS)
        }

    def list_prompts(self) -> list[PromptDefinition]:
        return [definition for definition, _ in self._prompts.values()]

    def get(self, name: str) -> Optional[PromptDefinition]:
        entry = self._prompts.get(name)
        return entry[0] if entry else None

    def render(self, name: str, arguments: Optional[dict[str, Any]] = None) -> str:
        """
        Render a prompt to its message text.

        Raises:
            PromptError: If the prompt is unknown or the arguments are invalid
        """
        entry = self._prompts.get(name)
        if entry is None:
            raise PromptError(f"Prompt '{name}' not found")

        definition, renderer = entry
        args = arguments or {}

        is_valid, errors = validate_schema(args, argument_schema(definition))
        if not is_valid:
            raise PromptError(f"Invalid arguments for prompt '{name}': {'; '.join(errors)}")

        return renderer(args)
