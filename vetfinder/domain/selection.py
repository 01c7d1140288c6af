"""
Category/specialization selection.

A category id is selected if and only if at least one of its specializations
is selected. ServiceSelection is the only place the two id sets are mutated,
and every public mutator leaves that invariant intact.
"""

from __future__ import annotations

from vetfinder.domain.entities.service_catalog import (
    CategorySpecialization,
    CategoryWithSpecializations,
    ServiceCatalog,
)


class ServiceSelection:
    def __init__(
        self,
        catalog: ServiceCatalog | None = None,
        category_ids: tuple[int, ...] | list[int] = (),
        specialization_ids: tuple[int, ...] | list[int] = (),
    ) -> None:
        self._catalog = catalog or ServiceCatalog()
        self._categories: set[int] = set(category_ids)
        self._specializations: set[int] = set(specialization_ids)

    @property
    def catalog(self) -> ServiceCatalog:
        return self._catalog

    def use_catalog(self, catalog: ServiceCatalog) -> None:
        self._catalog = catalog
        self._resync_categories()

    # ---- queries ----

    @property
    def selected_category_ids(self) -> tuple[int, ...]:
        return tuple(sorted(self._categories))

    @property
    def selected_specialization_ids(self) -> tuple[int, ...]:
        return tuple(sorted(self._specializations))

    def is_selected(self, specialization_id: int) -> bool:
        return specialization_id in self._specializations

    def selected_count(self, category: CategoryWithSpecializations) -> int:
        return sum(1 for spec in category.specializations if spec.id in self._specializations)

    def is_all_selected(self, category: CategoryWithSpecializations) -> bool:
        # Vacuously true for an empty category, which toggle_all_in_category treats as a no-op.
        return all(spec.id in self._specializations for spec in category.specializations)

    def is_partially_selected(self, category: CategoryWithSpecializations) -> bool:
        count = self.selected_count(category)
        return 0 < count < len(category.specializations)

    # ---- mutators ----

    def toggle_specialization(self, spec: CategorySpecialization) -> None:
        if spec.id in self._specializations:
            self.deselect(spec)
        else:
            self.select(spec)

    def select(self, spec: CategorySpecialization) -> None:
        self._specializations.add(spec.id)
        self._categories.add(spec.category_id)

    def deselect(self, spec: CategorySpecialization) -> None:
        self._specializations.discard(spec.id)
        if not self._has_selected_sibling(spec.category_id):
            self._categories.discard(spec.category_id)

    def toggle_all_in_category(self, category: CategoryWithSpecializations) -> None:
        spec_ids = category.specialization_ids
        if not spec_ids:
            return
        if self.is_all_selected(category):
            self._specializations.difference_update(spec_ids)
            self._categories.discard(category.id)
        else:
            self._specializations.update(spec_ids)
            self._categories.add(category.id)

    def clear(self) -> None:
        self._specializations.clear()
        self._categories.clear()

    def _has_selected_sibling(self, category_id: int) -> bool:
        category = self._catalog.get_category(category_id)
        if category is None:
            return False
        return any(spec.id in self._specializations for spec in category.specializations)

    def _resync_categories(self) -> None:
        # Drop ids the new reference data does not know and rebuild categories from the survivors.
        if not self._catalog.is_loaded:
            return
        specs = [self._catalog.get_specialization(spec_id) for spec_id in self._specializations]
        known = [spec for spec in specs if spec is not None]
        self._specializations = {spec.id for spec in known}
        self._categories = {spec.category_id for spec in known}


class CategoryPicker:
    """Two-level picker: selection plus the presentation-only expanded set."""

    def __init__(self, selection: ServiceSelection | None = None, disabled: bool = False) -> None:
        self.selection = selection or ServiceSelection()
        self.disabled = disabled
        self._expanded: set[int] = set()

    @property
    def catalog(self) -> ServiceCatalog:
        return self.selection.catalog

    @property
    def expanded_category_ids(self) -> tuple[int, ...]:
        return tuple(sorted(self._expanded))

    def toggle_category_expansion(self, category_id: int) -> None:
        if category_id in self._expanded:
            self._expanded.remove(category_id)
        else:
            self._expanded.add(category_id)

    def toggle_specialization(self, specialization_id: int) -> bool:
        """Returns False when the id is unknown or the picker is disabled."""
        if self.disabled:
            return False
        spec = self.catalog.get_specialization(specialization_id)
        if spec is None:
            return False
        self.selection.toggle_specialization(spec)
        return True

    def toggle_all_in_category(self, category_id: int) -> bool:
        if self.disabled:
            return False
        category = self.catalog.get_category(category_id)
        if category is None:
            return False
        self.selection.toggle_all_in_category(category)
        return True
