from database.category_dao import CategoryDAO
from models.category import Category
from utils.constants import CATEGORY_TYPES, FALLBACK_COLOR_HEX, FALLBACK_ICON


class CategoryService:
    def __init__(self, category_dao: CategoryDAO):
        self._dao = category_dao

    def get_all(self) -> list[Category]:
        return self._dao.get_all()

    def get_by_name(self, name: str) -> Category | None:
        return self._dao.get_by_name(name.strip())

    def lookup(self, category_id: int | None) -> Category | None:
        """Resolve a transaction's category reference; None if unset or deleted."""
        if category_id is None:
            return None
        return self._dao.get_by_id(category_id)

    def require(self, category_id: int) -> Category:
        cat = self._dao.get_by_id(category_id)
        if cat is None:
            raise ValueError(f"Unknown category id: {category_id}")
        return cat

    def is_income(self, category_id: int | None) -> bool:
        cat = self.lookup(category_id)
        return cat is not None and cat.is_income

    def create(
        self,
        name: str,
        type_: str = "expense",
        icon: str = FALLBACK_ICON,
        color_hex: str = FALLBACK_COLOR_HEX,
    ) -> Category:
        name = name.strip()
        if not name:
            raise ValueError("Category name cannot be empty.")
        if type_ not in CATEGORY_TYPES:
            raise ValueError("Type must be income or expense.")
        existing = [c.name.lower() for c in self._dao.get_all()]
        if name.lower() in existing:
            raise ValueError(f"A category named '{name}' already exists.")
        return self._dao.create(name, type_, icon, color_hex, self._dao.next_sort_index())

    def update(
        self, category_id: int, name: str, type_: str, icon: str, color_hex: str
    ) -> Category:
        name = name.strip()
        if not name:
            raise ValueError("Category name cannot be empty.")
        if type_ not in CATEGORY_TYPES:
            raise ValueError("Type must be income or expense.")
        existing = [c for c in self._dao.get_all() if c.id != category_id]
        if any(c.name.lower() == name.lower() for c in existing):
            raise ValueError(f"A category named '{name}' already exists.")
        return self._dao.update(category_id, name, type_, icon, color_hex)

    def delete(self, category_id: int):
        cat = self._dao.get_by_id(category_id)
        if cat and cat.is_system:
            raise ValueError("System categories cannot be deleted.")
        self._dao.delete(category_id)
