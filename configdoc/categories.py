"""Field categories and the flag-name override table."""
from __future__ import annotations

from enum import Enum
from typing import Dict, Mapping, Optional, Union


class Category(str, Enum):
    """Maturity level of a configuration field."""

    BASIC = "basic"
    ADVANCED = "advanced"
    EXPERIMENTAL = "experimental"
    DEPRECATED = "deprecated"

    @classmethod
    def parse(cls, label: Union[str, "Category"]) -> "Category":
        if isinstance(label, Category):
            return label
        normalized = label.strip().lower()
        try:
            return cls(normalized)
        except ValueError:
            allowed = ", ".join(member.value for member in cls)
            raise ValueError(
                f"unknown field category {label!r}; expected one of: {allowed}"
            ) from None


class CategoryOverrides:
    """Categories forced by flag name, taking precedence over field annotations."""

    def __init__(self, overrides: Optional[Mapping[str, Union[str, Category]]] = None) -> None:
        self._overrides: Dict[str, Category] = {}
        if overrides:
            self.update(overrides)

    def update(self, overrides: Mapping[str, Union[str, Category]]) -> None:
        parsed = {name: Category.parse(label) for name, label in overrides.items()}
        self._overrides.update(parsed)

    def get(self, flag_name: Optional[str]) -> Optional[Category]:
        if not flag_name:
            return None
        return self._overrides.get(flag_name)

    def __len__(self) -> int:
        return len(self._overrides)


CATEGORY_OVERRIDES = CategoryOverrides()

__all__ = ["CATEGORY_OVERRIDES", "Category", "CategoryOverrides"]
