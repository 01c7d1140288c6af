from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class CategorySpecialization:
    id: int
    category_id: int
    name: str
    description: str | None = None
    suggested_duration_minutes: int = 30
    display_order: int = 0
    icon: str | None = None


@dataclass(frozen=True)
class ServiceCategory:
    id: int
    name: str
    description: str | None = None
    icon: str | None = None
    display_order: int = 0


@dataclass(frozen=True)
class CategoryWithSpecializations:
    category: ServiceCategory
    specializations: tuple[CategorySpecialization, ...] = ()

    @property
    def id(self) -> int:
        return self.category.id

    @property
    def name(self) -> str:
        return self.category.name

    @property
    def specialization_ids(self) -> tuple[int, ...]:
        return tuple(spec.id for spec in self.specializations)

    @staticmethod
    def from_payload(payload: dict[str, Any]) -> "CategoryWithSpecializations":
        category_id = int(payload["id"])
        specs = tuple(
            CategorySpecialization(
                id=int(item["id"]),
                category_id=int(item.get("category_id") or category_id),
                name=str(item.get("name") or ""),
                description=item.get("description"),
                suggested_duration_minutes=int(item.get("suggested_duration_minutes") or 30),
                display_order=int(item.get("display_order") or 0),
                icon=item.get("icon"),
            )
            for item in (payload.get("specializations") or [])
        )
        return CategoryWithSpecializations(
            category=ServiceCategory(
                id=category_id,
                name=str(payload.get("name") or ""),
                description=payload.get("description"),
                icon=payload.get("icon"),
                display_order=int(payload.get("display_order") or 0),
            ),
            specializations=tuple(sorted(specs, key=lambda s: s.display_order)),
        )


@dataclass(frozen=True)
class ServiceCatalog:
    """Read-only category/specialization reference data, indexed by id."""

    categories: tuple[CategoryWithSpecializations, ...] = ()
    _categories_by_id: dict[int, CategoryWithSpecializations] = field(default_factory=dict, repr=False, compare=False)
    _specs_by_id: dict[int, CategorySpecialization] = field(default_factory=dict, repr=False, compare=False)

    def __post_init__(self) -> None:
        ordered = tuple(sorted(self.categories, key=lambda c: c.category.display_order))
        object.__setattr__(self, "categories", ordered)
        for entry in ordered:
            self._categories_by_id[entry.id] = entry
            for spec in entry.specializations:
                self._specs_by_id[spec.id] = spec

    @staticmethod
    def from_payload(items: list[dict[str, Any]]) -> "ServiceCatalog":
        return ServiceCatalog(categories=tuple(CategoryWithSpecializations.from_payload(i) for i in items))

    @property
    def is_loaded(self) -> bool:
        return bool(self.categories) and bool(self._specs_by_id)

    def get_category(self, category_id: int) -> CategoryWithSpecializations | None:
        return self._categories_by_id.get(category_id)

    def get_specialization(self, specialization_id: int) -> CategorySpecialization | None:
        return self._specs_by_id.get(specialization_id)
