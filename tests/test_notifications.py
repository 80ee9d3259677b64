import pytest
from lupon_client.models import Stage
from lupon_client.notifications import (
    NotificationType,
    parse_notifications,
    render,
    scheduled_type,
    unread,
)


def test_render_known_types():
    assert render(NotificationType.CASE_SETTLED, "Unpaid debt") == (
        "Case Settled",
        'Your case "Unpaid debt" has been successfully settled.',
    )
    title, message = render("case_for_approval", "Noise", case_id=2025003)
    assert title == "New Case for Approval"
    assert "Case #2025003" in message


def test_render_unknown_type_falls_back():
    assert render("something_else", "Boundary") == (
        "Case Update",
        'There has been an update to your case "Boundary".',
    )


@pytest.mark.parametrize("stage", list(Stage))
def test_scheduled_type_per_stage(stage):
    kind = scheduled_type(stage)
    title, _ = render(kind, "x")
    assert title == f"{stage.value.capitalize()} Scheduled"


def test_parse_and_filter_unread():
    items = parse_notifications(
        {
            "success": True,
            "notifications": [
                {"id": 1, "type": "case_accepted", "title": "Case Accepted", "is_read": True},
                {"id": 2, "type": "mediation_scheduled", "title": "Mediation Scheduled"},
            ],
        }
    )
    assert [item.id for item in unread(items)] == [2]
    assert parse_notifications({}) == []
