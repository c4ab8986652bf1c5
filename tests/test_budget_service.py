import pytest

from utils.constants import DEFAULT_OVERALL_BUDGET


def test_overall_budget_seeded_on_first_read(budget_service, budget_dao):
    assert budget_dao.get_overall("2024-03") is None
    overall = budget_service.get_overall("2024-03")
    assert overall.amount == DEFAULT_OVERALL_BUDGET
    assert overall.is_overall
    assert not overall.sync_with_income
    assert budget_dao.get_overall("2024-03").id == overall.id


def test_set_overall_and_spent(budget_service, tx_service, categories):
    tx_service.create(300.0, "2024-03-04", category_id=categories["Bills"].id)
    tx_service.create(1500.0, "2024-03-01", category_id=categories["Income"].id)
    budget_service.set_overall("2024-03", 1200.0)

    overall = budget_service.get_overall("2024-03")
    assert overall.amount == 1200.0
    assert overall.spent_amount == 300.0
    assert overall.remaining == 900.0
    assert overall.percentage == pytest.approx(0.25)


def test_sync_with_income_tracks_positive_amounts(budget_service, tx_service, categories):
    income = categories["Income"].id
    tx_service.create(2500.0, "2024-03-01", category_id=income)
    tx_service.create(-40.0, "2024-03-02", category_id=categories["Dining"].id)

    synced = budget_service.set_sync_with_income("2024-03", True)
    assert synced.amount == 2500.0
    assert synced.sync_with_income

    tx_service.create(500.0, "2024-03-20", category_id=income)
    assert budget_service.get_overall("2024-03").amount == 3000.0

    manual = budget_service.set_sync_with_income("2024-03", False)
    assert manual.amount == 3000.0
    assert not manual.sync_with_income

    tx_service.create(100.0, "2024-03-21", category_id=income)
    assert budget_service.get_overall("2024-03").amount == 3000.0


def test_sync_off_with_manual_amount(budget_service):
    budget_service.set_sync_with_income("2024-05", True)
    manual = budget_service.set_sync_with_income("2024-05", False, 750.0)
    assert manual.amount == 750.0


def test_setting_overall_turns_sync_off(budget_service):
    budget_service.set_sync_with_income("2024-05", True)
    assert not budget_service.set_overall("2024-05", 900.0).sync_with_income


def test_category_budgets_and_status(budget_service, tx_service, categories):
    dining = categories["Dining"].id
    budget_service.set_category_budget("2024-03", dining, 200.0)
    budget_service.set_category_budget("2024-03", dining, 250.0)
    tx_service.create(-60.0, "2024-03-10", category_id=dining)
    tx_service.create(-15.0, "2024-04-10", category_id=dining)

    status = budget_service.get_budget_status("2024-03")
    assert len(status) == 1
    assert status[0].category_name == "Dining"
    assert status[0].amount == 250.0
    assert status[0].spent_amount == 60.0
    assert status[0].remaining == 190.0


def test_remaining_can_go_negative(budget_service, tx_service, categories):
    bills = categories["Bills"].id
    budget_service.set_category_budget("2024-03", bills, 50.0)
    tx_service.create(-80.0, "2024-03-10", category_id=bills)
    assert budget_service.get_budget_status("2024-03")[0].remaining == -30.0


def test_delete_category_budget(budget_service, categories):
    dining = categories["Dining"].id
    budget_service.set_category_budget("2024-03", dining, 200.0)
    budget_service.set_category_budget("2024-04", dining, 300.0)
    budget_service.delete_category_budget("2024-03", dining)
    assert budget_service.get_budget_status("2024-03") == []
    assert [b.amount for b in budget_service.get_budget_status("2024-04")] == [300.0]
    with pytest.raises(ValueError, match="No budget"):
        budget_service.delete_category_budget("2024-03", dining)


def test_copy_from_previous_month(budget_service, categories):
    budget_service.set_category_budget("2023-12", categories["Dining"].id, 100.0)
    budget_service.set_category_budget("2023-12", categories["Bills"].id, 400.0)
    assert budget_service.copy_from_previous_month("2024-01") == 2
    amounts = {b.category_name: b.amount for b in budget_service.get_budget_status("2024-01")}
    assert amounts == {"Dining": 100.0, "Bills": 400.0}


def test_budget_validation(budget_service, categories):
    with pytest.raises(ValueError):
        budget_service.set_overall("2024-03", -1.0)
    with pytest.raises(ValueError):
        budget_service.set_category_budget("2024-03", categories["Dining"].id, -5.0)
    with pytest.raises(ValueError):
        budget_service.set_category_budget("2024-03", 9999, 5.0)
    with pytest.raises(ValueError):
        budget_service.get_overall("March")


def test_expense_categories_exclude_income(budget_service):
    names = [c.name for c in budget_service.get_expense_categories()]
    assert "Income" not in names
    assert names == ["Dining", "Transport", "Bills", "Entertainment", "Shopping"]
