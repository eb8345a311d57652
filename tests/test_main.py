import pytest

from ordernest import main as cli
from ordernest.data.order_records import normalize_order
from ordernest.data.order_store import SqliteOrderStore
from ordernest.services.order_metrics import category_total


def _add(capsys, *extra):
    assert cli.main(["add", "--name", "Δήμητρα", "--afm", "123", *extra]) == 0
    return capsys.readouterr().out


def test_add_then_list(capsys):
    out = _add(capsys, "--item", "cookies:Βανίλια:10", "--item", "cookies:Σοκολάτα:5", "--discount", "10")

    assert out.startswith("Created order #1 ")

    assert cli.main(["list"]) == 0
    listing = capsys.readouterr().out
    assert "#1" in listing
    assert "Δήμητρα" in listing
    assert "Μπισκότα (15)" in listing
    assert "Εκκρεμής" in listing


def test_item_type_may_contain_colons(capsys):
    _add(capsys, "--item", "toppers:Χρόνια πολλά: Νίκο:2")

    assert cli.main(["show", "1"]) == 0
    detail = capsys.readouterr().out
    assert "Τόπερς:" in detail
    assert "Χρόνια πολλά: Νίκο x 2" in detail


def test_status_change_and_filter(capsys):
    _add(capsys)
    _add(capsys)

    assert cli.main(["status", "#2", "shipped"]) == 0
    assert capsys.readouterr().out.strip() == "#2: Αποστολή"

    cli.main(["list", "--status", "shipped"])
    lines = capsys.readouterr().out.strip().splitlines()
    assert len(lines) == 1
    assert lines[0].startswith("#2 ")


def test_edit_keeps_status_and_creation_date(capsys):
    _add(capsys, "--phone", "6900000000", "--item", "cookies:Βανίλια:10")
    cli.main(["status", "1", "payment"])
    capsys.readouterr()
    (before,) = SqliteOrderStore().select_all()

    exit_code = cli.main(
        ["edit", "1", "--name", "Δήμητρα Κ.", "--clear", "cookies", "--item", "toppers:Χρόνια πολλά:2", "--discount", "5"]
    )

    assert exit_code == 0
    assert capsys.readouterr().out.strip() == "Updated order #1"
    (after,) = SqliteOrderStore().select_all()
    assert after["status"] == "payment"
    assert after["created_at"] == before["created_at"]
    assert after["order_number"] == "1"

    order = normalize_order(after)
    assert order.customer_name == "Δήμητρα Κ."
    assert order.customer_afm == "123"
    assert order.customer_phone == "6900000000"
    assert order.discount == "5"
    assert order.selection["cookies"] is False
    assert order.line_items["cookies"] == []
    assert [(item.product_type, item.quantity) for item in order.line_items["toppers"]] == [("Χρόνια πολλά", 2)]


def test_edit_adds_to_selected_category(capsys):
    _add(capsys, "--item", "cookies:Βανίλια:10")

    assert cli.main(["edit", "1", "--item", "cookies:Σοκολάτα:5 τεμ."]) == 0

    (record,) = SqliteOrderStore().select_all()
    assert category_total(normalize_order(record), "cookies") == 15


def test_edit_rejects_unknown_category(capsys):
    _add(capsys)

    assert cli.main(["edit", "1", "--clear", "cakes"]) == 1
    assert "Unknown product category: cakes" in capsys.readouterr().err


def test_print_html(capsys, tmp_path):
    _add(capsys, "--remarks", "Ροζ κουτί")

    destination = tmp_path / "out" / "order.html"
    assert cli.main(["print", "1", str(destination)]) == 0

    assert destination.exists()
    assert "Ροζ κουτί" in destination.read_text(encoding="utf-8")


def test_delete(capsys):
    _add(capsys)

    assert cli.main(["delete", "1"]) == 0
    assert capsys.readouterr().out.strip() == "Deleted order #1"

    cli.main(["list"])
    assert capsys.readouterr().out == ""


def test_missing_order_reports_error(capsys):
    assert cli.main(["show", "99"]) == 1

    assert "Order 99 not found" in capsys.readouterr().err


def test_unknown_category_is_an_error(capsys):
    assert cli.main(["add", "--name", "Χ", "--item", "cakes:Σοκολάτα:1"]) == 1

    assert "Unknown product category: cakes" in capsys.readouterr().err


def test_statuses_lists_every_tag(capsys):
    assert cli.main(["statuses"]) == 0

    tags = [line.split("\t")[0] for line in capsys.readouterr().out.splitlines()]
    assert tags == ["pending", "proforma_sent", "payment", "shipped", "shipped_unpaid"]


def test_invalid_status_is_rejected_by_parser():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["status", "1", "archived"])
