"""
Tests de los documentos GraphQL de suscripciones.
"""

import pytest

from shopify_webhooks.webhooks.queries import (
    build_check_query,
    build_subscription_mutation,
    mutation_name,
)
from shopify_webhooks.webhooks.types import (
    CreateSubscription,
    EventBridgeDeliveryTarget,
    HttpDeliveryTarget,
    UpdateSubscription,
)

HTTP_TARGET = HttpDeliveryTarget(callback_url="https://test_host_name/webhooks")
EVENT_BRIDGE_TARGET = EventBridgeDeliveryTarget(arn="arn:aws:events:us-east-1::event-source/aws.partner/shopify.com/1/source")


class TestCheckQuery:
    def test_check_query_requests_first_subscription_for_topic(self):
        query = build_check_query("PRODUCTS_CREATE")

        assert "webhookSubscriptions(first: 1, topics: PRODUCTS_CREATE)" in query
        assert "callbackUrl" in query
        assert "id" in query


class TestMutationName:
    @pytest.mark.parametrize(
        "target, operation, expected",
        [
            (HTTP_TARGET, CreateSubscription(topic="PRODUCTS_CREATE"), "webhookSubscriptionCreate"),
            (HTTP_TARGET, UpdateSubscription(subscription_id="gid://1"), "webhookSubscriptionUpdate"),
            (EVENT_BRIDGE_TARGET, CreateSubscription(topic="PRODUCTS_CREATE"), "eventBridgeWebhookSubscriptionCreate"),
            (EVENT_BRIDGE_TARGET, UpdateSubscription(subscription_id="gid://1"), "eventBridgeWebhookSubscriptionUpdate"),
        ],
    )
    def test_mutation_name_for_each_variant(self, target, operation, expected):
        assert mutation_name(target, operation) == expected

    def test_unknown_target_raises(self):
        with pytest.raises(TypeError):
            mutation_name("https://nope", CreateSubscription(topic="PRODUCTS_CREATE"))


class TestSubscriptionMutation:
    def test_http_create_is_addressed_by_topic(self):
        mutation = build_subscription_mutation(HTTP_TARGET, CreateSubscription(topic="PRODUCTS_CREATE"))

        assert (
            'webhookSubscriptionCreate(topic: PRODUCTS_CREATE, webhookSubscription: {callbackUrl: "https://test_host_name/webhooks"})'
            in mutation
        )
        assert "userErrors" in mutation
        assert "webhookSubscription {" in mutation

    def test_http_update_is_addressed_by_id(self):
        mutation = build_subscription_mutation(HTTP_TARGET, UpdateSubscription(subscription_id="fakeId"))

        assert 'webhookSubscriptionUpdate(id: "fakeId", webhookSubscription: {callbackUrl:' in mutation
        assert "topic:" not in mutation

    def test_event_bridge_uses_arn_field(self):
        mutation = build_subscription_mutation(EVENT_BRIDGE_TARGET, CreateSubscription(topic="ORDERS_CREATE"))

        assert "eventBridgeWebhookSubscriptionCreate(topic: ORDERS_CREATE" in mutation
        assert f'arn: "{EVENT_BRIDGE_TARGET.arn}"' in mutation
        assert "callbackUrl" not in mutation
