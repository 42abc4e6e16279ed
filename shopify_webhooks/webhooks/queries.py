"""
Webhook-related GraphQL queries and mutations.

This module builds the GraphQL documents sent by the registry:
- Existence check for a topic's subscription
- Create/update mutations for HTTP and EventBridge subscriptions
"""

from shopify_webhooks.webhooks.types import (
    CreateSubscription,
    DeliveryTarget,
    EventBridgeDeliveryTarget,
    HttpDeliveryTarget,
    SubscriptionOperation,
    UpdateSubscription,
)

WEBHOOK_CHECK_QUERY = """{{
    webhookSubscriptions(first: 1, topics: {topic}) {{
      edges {{
        node {{
          id
          callbackUrl
        }}
      }}
    }}
  }}"""

WEBHOOK_SUBSCRIPTION_MUTATION = """
    mutation webhookSubscription {{
      {name}({identifier}, webhookSubscription: {{{target_field}: "{address}"}}) {{
        userErrors {{
          field
          message
        }}
        webhookSubscription {{
          id
        }}
      }}
    }}
  """


def build_check_query(topic: str) -> str:
    """Query for the first existing subscription on a topic."""
    return WEBHOOK_CHECK_QUERY.format(topic=topic)


def mutation_name(target: DeliveryTarget, operation: SubscriptionOperation) -> str:
    """
    Name of the mutation field for a target/operation pair.

    Raises:
        TypeError: If target or operation is not one of the known variants
    """
    if isinstance(target, EventBridgeDeliveryTarget):
        prefix = "eventBridgeWebhookSubscription"
    elif isinstance(target, HttpDeliveryTarget):
        prefix = "webhookSubscription"
    else:
        raise TypeError(f"Unknown delivery target: {target!r}")

    if isinstance(operation, CreateSubscription):
        return f"{prefix}Create"
    if isinstance(operation, UpdateSubscription):
        return f"{prefix}Update"
    raise TypeError(f"Unknown subscription operation: {operation!r}")


def build_subscription_mutation(target: DeliveryTarget, operation: SubscriptionOperation) -> str:
    """
    Create or update mutation for a subscription.

    Creates are addressed by topic, updates by the existing subscription id.
    """
    if isinstance(operation, UpdateSubscription):
        identifier = f'id: "{operation.subscription_id}"'
    else:
        identifier = f"topic: {operation.topic}"

    target_field = "arn" if isinstance(target, EventBridgeDeliveryTarget) else "callbackUrl"

    return WEBHOOK_SUBSCRIPTION_MUTATION.format(
        name=mutation_name(target, operation),
        identifier=identifier,
        target_field=target_field,
        address=target.address,
    )
