from pathlib import Path

import pytest

from database.db_manager import DatabaseManager
from database.transaction_dao import TransactionDAO
from database.category_dao import CategoryDAO
from database.budget_dao import BudgetDAO
from services.transaction_service import TransactionService
from services.category_service import CategoryService
from services.budget_service import BudgetService
from services.report_service import ReportService


@pytest.fixture()
def db(tmp_path: Path):
    manager = DatabaseManager(str(tmp_path / "test.db"))
    manager.initialize()
    yield manager
    manager.close()


@pytest.fixture()
def tx_dao(db):
    return TransactionDAO(db)


@pytest.fixture()
def category_dao(db):
    return CategoryDAO(db)


@pytest.fixture()
def budget_dao(db):
    return BudgetDAO(db)


@pytest.fixture()
def category_service(category_dao):
    return CategoryService(category_dao)


@pytest.fixture()
def tx_service(tx_dao, category_service):
    return TransactionService(tx_dao, category_service)


@pytest.fixture()
def budget_service(budget_dao, tx_dao, category_dao):
    return BudgetService(budget_dao, tx_dao, category_dao)


@pytest.fixture()
def report_service(tx_dao, budget_service):
    return ReportService(tx_dao, budget_service)


@pytest.fixture()
def categories(category_service):
    return {c.name: c for c in category_service.get_all()}
