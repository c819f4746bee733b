"""End-to-end tests for the event handlers through the bus."""

from __future__ import annotations

import pytest

from portal_notifications.application.handlers import HANDLER_SETS
from portal_notifications.application.notifications import (
    CHANNEL_EMAIL,
    CHANNEL_NOTIFICATION,
    CHANNEL_SMS,
)
from portal_notifications.application.handlers.templates import (
    PAYMENT_SUCCESS_TEMPLATE,
    TEAM_INVITED_TEMPLATE,
)
from portal_notifications.domain.errors import InvalidEventPayload

pytestmark = pytest.mark.anyio


def _receipt(user_id: str, **values) -> dict:
    receipt = {
        "id": "receipt-1",
        "user_id": user_id,
        "amount": 29.99,
        "transaction_id": "txn-1",
        "plan_name": "Pro",
        "billing_cycle": "monthly",
        "transaction_date": "2026-03-01T10:30:00",
        "card": {"brand": "visa", "last4": "4242", "exp_month": 4, "exp_year": 2030},
    }
    receipt.update(values)
    return receipt


async def test_every_handler_set_is_registered(bus) -> None:
    subscribed = set(bus.event_names())
    expected = {name for handler_set in HANDLER_SETS for name in handler_set.subscriptions}

    assert subscribed == expected
    assert "billing.payment.success" in subscribed
    assert "user.password.updated" in subscribed


async def test_payment_success_without_phone_skips_sms(bus, seed, store, email_provider, sms_provider) -> None:
    user = await seed.user(phone_number=None)

    result = await bus.publish("billing.payment.success", {"receipt": _receipt(user.id)})

    assert result.ok
    report = result.outcomes[0].result
    assert report.sent(CHANNEL_NOTIFICATION) == 1
    assert report.sent(CHANNEL_EMAIL) == 1
    assert report.sent(CHANNEL_SMS) == 0
    assert report.failed() == 0

    notifications = await store.list_for_user(user.id)
    assert len(notifications) == 1
    assert notifications[0].notification_type == "payment"
    assert notifications[0].message == (
        "Your payment of $29.99 was processed successfully. Thank you for your Pro subscription!"
    )
    assert len(email_provider.sent_messages) == 1
    assert email_provider.sent_messages[0].template_id == PAYMENT_SUCCESS_TEMPLATE
    assert email_provider.sent_messages[0].data["pmExp"] == "04/30"
    assert sms_provider.sent_messages == []


async def test_payment_success_texts_opted_in_users(bus, seed, sms_provider) -> None:
    user = await seed.user(phone_number="(555) 123-4567", account_notification_sms=True)

    result = await bus.publish("billing.payment.success", {"receipt": _receipt(user.id)})

    assert result.outcomes[0].result.sent(CHANNEL_SMS) == 1
    assert sms_provider.sent_messages[0].to == "+15551234567"


async def test_sms_opt_out_is_honoured(bus, seed, sms_provider) -> None:
    user = await seed.user(phone_number="+15551234567", account_notification_sms=False)

    result = await bus.publish("billing.payment.failed", {"receipt": _receipt(user.id)})

    assert result.outcomes[0].result.sent(CHANNEL_SMS) == 0
    assert sms_provider.sent_messages == []


async def test_failing_email_does_not_block_other_channels(bus, seed, store, email_provider, sms_provider) -> None:
    email_provider.configure(should_fail=True)
    user = await seed.user(phone_number="+15551234567")

    result = await bus.publish(
        "billing.payment.failed",
        {"receipt": _receipt(user.id, failure_reason="Card declined")},
    )

    assert result.ok
    report = result.outcomes[0].result
    assert report.failed(CHANNEL_EMAIL) == 1
    assert report.sent(CHANNEL_NOTIFICATION) == 1
    assert report.sent(CHANNEL_SMS) == 1
    notifications = await store.list_for_user(user.id)
    assert notifications[0].message == (
        "Your payment of $29.99 failed: Card declined. Please update your payment method."
    )


async def test_missing_payload_fields_fail_the_handler_only(bus) -> None:
    result = await bus.publish("billing.payment.success", {"receipt": {"id": "r-1"}})

    assert result.failed == 1
    error = result.outcomes[0].error
    assert isinstance(error, InvalidEventPayload)
    assert error.missing == ("user_id", "amount")


async def test_unknown_user_is_reported_as_skipped(bus, email_provider) -> None:
    result = await bus.publish("billing.payment.success", {"receipt": _receipt("missing-user")})

    assert result.ok
    assert result.outcomes[0].result.skipped_reason == "user not found"
    assert email_provider.sent_messages == []


async def test_user_registration_notifies_every_admin(bus, seed, store, email_provider) -> None:
    first_admin = await seed.user(roles=["admin"])
    second_admin = await seed.user(roles=["Admin", "developer"])
    await seed.user(roles=["athlete"])
    newcomer = await seed.user(email="newcomer@example.com")

    result = await bus.publish("user.registered", {"user_id": newcomer.id})

    assert result.ok
    for admin in (first_admin, second_admin):
        notifications = await store.list_for_user(admin.id)
        assert [n.message for n in notifications] == ["New user registered: newcomer@example.com"]
        assert notifications[0].entity_id == newcomer.id
    assert [payload.to for payload in email_provider.sent_messages] == ["newcomer@example.com"]


async def test_password_updated_creates_notification(bus, seed, store) -> None:
    user = await seed.user()

    await bus.publish("user.password.updated", {"user_id": user.id})

    notifications = await store.list_for_user(user.id)
    assert notifications[0].title == "Password Updated"


async def test_conversation_message_notifies_receiving_party(bus, seed, store) -> None:
    athlete_user = await seed.user()
    team_user = await seed.user()
    athlete = await seed.athlete(athlete_user)
    team = await seed.team(team_user)
    conversation = await seed.conversation(athlete, team)
    message = await seed.message_to_athlete(conversation)

    result = await bus.publish("conversation.message", {"message_id": message.id})

    assert result.ok
    notifications = await store.list_for_user(athlete_user.id)
    assert len(notifications) == 1
    assert notifications[0].sender_id == team_user.id
    assert notifications[0].entity_id == message.id


async def test_conversation_started_alerts_only_the_athlete(bus, seed, email_provider, sms_provider) -> None:
    athlete_user = await seed.user(phone_number="+15551234567")
    team_user = await seed.user()
    athlete = await seed.athlete(athlete_user, email="athlete@example.com")
    team = await seed.team(team_user)
    conversation = await seed.conversation(athlete, team)

    result = await bus.publish("conversation.started", {"conversation_id": conversation.id})

    report = result.outcomes[0].result
    assert report.sent(CHANNEL_EMAIL) == 1
    assert report.sent(CHANNEL_SMS) == 1
    assert [payload.to for payload in email_provider.sent_messages] == ["athlete@example.com"]
    assert "Harbor City FC" in sms_provider.sent_messages[0].message


async def test_claim_created_notifies_developer_admins(bus, seed, store, email_provider) -> None:
    claimant = await seed.user(first_name="Jamie", email="jamie@example.com")
    athlete = await seed.athlete(claimant)
    developer = await seed.admin(await seed.user(), role="developer")
    await seed.admin(await seed.user(), role="support")

    result = await bus.publish(
        "claim.created",
        {
            "claim": {
                "id": "claim-1",
                "user_id": claimant.id,
                "profile_id": athlete.id,
                "claim_type": "athlete",
            }
        },
    )

    report = result.outcomes[0].result
    assert report.sent(CHANNEL_NOTIFICATION) == 1
    notifications = await store.list_for_user(developer.user_id)
    assert notifications[0].message == "A new claim has been created by Jamie (jamie@example.com)."
    assert email_provider.sent_messages[0].data["profileName"] == athlete.name


async def test_scout_report_notifies_athlete_and_scout(bus, seed, store) -> None:
    athlete = await seed.athlete(await seed.user())
    scout_user = await seed.user()
    scout = await seed.scout(scout_user)

    await bus.publish(
        "scout.report.submitted",
        {
            "report_id": "report-9",
            "athlete_id": athlete.id,
            "scout_user_id": scout_user.id,
            "is_approved": True,
        },
    )

    athlete_notifications = await store.list_for_user(athlete.user_id)
    assert athlete_notifications[0].title == "Scout Report Submitted"
    scout_notifications = await store.list_for_user(scout_user.id)
    assert scout_notifications[0].recipient_id == scout.id
    assert scout_notifications[0].message.endswith("was approved.")


@pytest.mark.parametrize(
    ("features", "expected", "names_viewer"),
    [
        (["profile_view_visibility"], "Casey Coach viewed your profile.", True),
        ([], "Someone viewed your profile. Upgrade your plan to see who.", False),
    ],
)
async def test_profile_view_reveals_viewer_only_with_feature(
    bus, seed, store, features, expected, names_viewer
) -> None:
    athlete_user = await seed.user(plan_features=features)
    athlete = await seed.athlete(athlete_user)
    viewer = await seed.user(first_name="Casey", last_name="Coach")

    await bus.publish("athlete.view.recorded", {"athlete_id": athlete.id, "viewer_id": viewer.id})

    notifications = await store.list_for_user(athlete_user.id)
    assert [n.message for n in notifications] == [expected]
    assert notifications[0].sender_id == (viewer.id if names_viewer else None)


async def test_profile_completion_alert_emails_and_texts(bus, seed, email_provider, sms_provider) -> None:
    user = await seed.user(phone_number="+15551234567")
    athlete = await seed.athlete(user, slug="jordan-smith")

    result = await bus.publish("athlete.profile.completion.alert", {"athlete_profile_id": athlete.id})

    report = result.outcomes[0].result
    assert report.sent(CHANNEL_EMAIL) == 1
    assert report.sent(CHANNEL_SMS) == 1
    assert email_provider.sent_messages[0].data["profileUrl"] == "https://portal.test/athletes/jordan-smith"


async def test_search_report_resolves_owner_by_type(bus, seed, store) -> None:
    team_user = await seed.user()
    team = await seed.team(team_user)

    result = await bus.publish(
        "search.report.generated",
        {
            "owner_id": team.id,
            "owner_type": "Team",
            "report_id": "search-1",
            "search_preference_name": "Left-footed strikers",
            "result_count": 12,
        },
    )

    assert result.ok
    notifications = await store.list_for_user(team_user.id)
    assert notifications[0].message == (
        'Your search report for "Left-footed strikers" is ready with 12 results.'
    )


async def test_search_report_with_unknown_owner_type_is_skipped(bus) -> None:
    result = await bus.publish(
        "search.report.generated",
        {"owner_id": "x", "owner_type": "league", "report_id": "search-1"},
    )

    assert result.ok
    assert result.outcomes[0].result.skipped_reason == "unsupported owner type league"


async def test_ticket_update_by_requester_only_notifies_assignee(bus, seed, store) -> None:
    requester = await seed.user()
    agent = await seed.user()
    ticket = {"id": "ticket-1", "subject": "Billing", "requester_id": requester.id}

    await bus.publish(
        "support.ticket.updated",
        {
            "ticket": ticket,
            "author": {"id": requester.id, "full_name": requester.full_name},
            "is_user": True,
            "assignee_id": agent.id,
        },
    )

    assert await store.list_for_user(requester.id) == []
    assert len(await store.list_for_user(agent.id)) == 1


async def test_ticket_update_by_agent_notifies_requester(bus, seed, store) -> None:
    requester = await seed.user()
    agent = await seed.user(first_name="Sam", last_name="Support")
    ticket = {"id": "ticket-1", "subject": "Billing", "requester_id": requester.id}

    await bus.publish(
        "support.ticket.updated",
        {
            "ticket": ticket,
            "author": {"id": agent.id, "full_name": agent.full_name},
            "is_user": False,
            "assignee_id": agent.id,
        },
    )

    notifications = await store.list_for_user(requester.id)
    assert notifications[0].message == "Sam Support has sent a new message on ticket #Billing"
    assert await store.list_for_user(agent.id) == []


async def test_team_invitation_notifies_and_emails(bus, seed, store, email_provider) -> None:
    team = await seed.team(await seed.user())

    result = await bus.publish(
        "team.invited",
        {
            "team_profile_id": team.id,
            "invitation": {"email": "coach@example.com", "inviter_name": "Portal Staff"},
        },
    )

    report = result.outcomes[0].result
    assert report.sent(CHANNEL_NOTIFICATION) == 1
    assert report.sent(CHANNEL_EMAIL) == 1
    sent = email_provider.sent_messages[0]
    assert sent.template_id == TEAM_INVITED_TEMPLATE
    assert sent.data["inviteUrl"] == "https://auth.portal.test/claim?slug=harbor-city-fc&type=team"
    assert sent.data["expiresInHours"] == 48
