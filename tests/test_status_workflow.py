import pytest

from ordernest.services import status_workflow


def test_statuses_are_ordered():
    assert status_workflow.list_status_tags() == [
        "pending",
        "proforma_sent",
        "payment",
        "shipped",
        "shipped_unpaid",
    ]


def test_initial_status_is_pending():
    assert status_workflow.initial_status() == "pending"


@pytest.mark.parametrize(
    "tag, label, tone",
    [
        ("pending", "Εκκρεμής", "caution"),
        ("proforma_sent", "Αποστ. Προτιμολογίου", "progress"),
        ("payment", "Πληρωμή", "progress"),
        ("shipped", "Αποστολή", "success"),
        ("shipped_unpaid", "Αποστολή χωρίς εξόφληση", "alert"),
    ],
)
def test_labels_and_tones(tag, label, tone):
    assert status_workflow.status_label(tag) == label
    assert status_workflow.status_tone(tag) == tone


def test_unknown_tag_presentation():
    assert status_workflow.status_label("archived") == "archived"
    assert status_workflow.status_tone("archived") == "neutral"


def test_terminal_statuses():
    terminal = [tag for tag in status_workflow.list_status_tags() if status_workflow.is_terminal(tag)]

    assert terminal == ["shipped", "shipped_unpaid"]


def test_migrate_status_never_maps_backwards():
    assert status_workflow.migrate_status("completed") == "shipped"
    assert status_workflow.migrate_status("shipped") == "shipped"
    assert status_workflow.migrate_status("cancelled") == "pending"


def test_filters_start_with_all():
    filters = status_workflow.list_status_filters()

    assert filters[0].tag == "all"
    assert [option.tag for option in filters[1:]] == status_workflow.list_status_tags()
    assert status_workflow.matches_status_filter("payment", "all")
    assert status_workflow.matches_status_filter("payment", "payment")
    assert not status_workflow.matches_status_filter("payment", "pending")


def test_resolve_status_change():
    assert status_workflow.resolve_status_change("payment") == "payment"
    assert status_workflow.resolve_status_change("completed") == "shipped"
    with pytest.raises(ValueError):
        status_workflow.resolve_status_change("cancelled")
