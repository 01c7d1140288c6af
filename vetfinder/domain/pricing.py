"""
Step 4 service list: keeps pricing entries in sync with the selected specializations.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Iterable, Sequence

from vetfinder.domain.entities.company import ServiceCategoryType
from vetfinder.domain.entities.service_catalog import CategorySpecialization, ServiceCatalog
from vetfinder.domain.entities.service_pricing import ServicePricingDraft
from vetfinder.domain.validation import parse_price

DEFAULT_DURATION_MINUTES = 30

_EDITABLE_FIELDS = frozenset({"service_name", "description", "price_min", "price_max", "duration_minutes", "category_id"})


@dataclass(frozen=True)
class PricingGroup:
    category_id: int
    category_name: str
    category_icon: str | None
    specializations: tuple[CategorySpecialization, ...]


def reconcile_pricing(
    entries: Sequence[ServicePricingDraft],
    selected_ids: Iterable[int],
    catalog: ServiceCatalog,
) -> list[ServicePricingDraft] | None:
    """
    Returns the new entry list, or None when nothing needs to change.

    Reference data must be loaded first: reconciling against an empty catalog
    would drop every entry, so that case is also reported as "no change".
    """
    if not catalog.is_loaded:
        return None

    selected = list(dict.fromkeys(selected_ids))
    selected_set = set(selected)

    named_ids = {
        e.specialization_id
        for e in entries
        if not e.is_custom and e.specialization_id is not None and e.has_name
    }
    new_ids = [spec_id for spec_id in selected if spec_id not in named_ids]
    removed = [
        e
        for e in entries
        if not e.is_custom and e.specialization_id is not None and e.specialization_id not in selected_set
    ]

    if not new_ids and not removed:
        return None

    fresh: list[ServicePricingDraft] = []
    for spec_id in new_ids:
        spec = catalog.get_specialization(spec_id)
        placeholder = next(
            (e for e in entries if e.specialization_id == spec_id and not e.has_name),
            None,
        )
        fresh.append(
            ServicePricingDraft(
                specialization_id=spec_id,
                category_id=spec.category_id if spec else None,
                service_name=spec.name if spec else "",
                description=(spec.description or "") if spec else "",
                price_min=placeholder.price_min if placeholder else None,
                price_max=placeholder.price_max if placeholder else None,
                duration_minutes=(spec.suggested_duration_minutes if spec else None) or DEFAULT_DURATION_MINUTES,
                is_custom=False,
            )
        )

    kept = [
        e
        for e in entries
        if e.is_custom or (e.specialization_id in selected_set and e.has_name)
    ]
    return kept + fresh


def group_by_category(selected_ids: Iterable[int], catalog: ServiceCatalog) -> list[PricingGroup]:
    grouped: dict[int, list[CategorySpecialization]] = {}
    for spec_id in selected_ids:
        spec = catalog.get_specialization(spec_id)
        if spec is None:
            continue
        grouped.setdefault(spec.category_id, []).append(spec)

    groups: list[PricingGroup] = []
    for category_id, specs in grouped.items():
        category = catalog.get_category(category_id)
        groups.append(
            PricingGroup(
                category_id=category_id,
                category_name=category.name if category else "",
                category_icon=category.category.icon if category else None,
                specializations=tuple(sorted(specs, key=lambda s: s.display_order)),
            )
        )
    return groups


def custom_entries(entries: Sequence[ServicePricingDraft]) -> list[ServicePricingDraft]:
    return [e for e in entries if e.is_custom]


def add_custom_service(entries: Sequence[ServicePricingDraft], entry: ServicePricingDraft) -> list[ServicePricingDraft]:
    return [*entries, replace(entry, is_custom=True, specialization_id=None)]


def remove_custom_service(entries: Sequence[ServicePricingDraft], index: int) -> list[ServicePricingDraft]:
    """Index is the position among custom entries only."""
    customs = custom_entries(entries)
    if not 0 <= index < len(customs):
        raise IndexError(f"No custom service at position {index}")
    del customs[index]
    return [e for e in entries if not e.is_custom] + customs


def update_custom_service(
    entries: Sequence[ServicePricingDraft], index: int, **fields: Any
) -> list[ServicePricingDraft]:
    _check_fields(fields)
    customs = custom_entries(entries)
    if not 0 <= index < len(customs):
        raise IndexError(f"No custom service at position {index}")
    customs[index] = replace(customs[index], **_coerce_prices(fields))
    return [e for e in entries if not e.is_custom] + customs


def update_specialization_service(
    entries: Sequence[ServicePricingDraft], specialization_id: int, **fields: Any
) -> list[ServicePricingDraft]:
    _check_fields(fields)
    if not any(e.specialization_id == specialization_id for e in entries):
        raise KeyError(specialization_id)
    values = _coerce_prices(fields)
    return [replace(e, **values) if e.specialization_id == specialization_id else e for e in entries]


def to_create_service_payloads(entries: Iterable[ServicePricingDraft]) -> list[dict[str, Any]]:
    """Entries that have both prices and a name, shaped for bulk creation."""
    payloads: list[dict[str, Any]] = []
    for e in entries:
        if e.price_min is None or e.price_max is None or not e.has_name:
            continue
        category = ServiceCategoryType.custom if e.is_custom else ServiceCategoryType.routine_care
        payloads.append(
            {
                "category": category.value,
                "service_name": e.service_name.strip(),
                "description": e.description or None,
                "specialization_id": e.specialization_id,
                "category_id": e.category_id,
                "price_min": parse_price(e.price_min) or 0.0,
                "price_max": parse_price(e.price_max) or 0.0,
                "duration_minutes": e.duration_minutes,
                "is_custom": e.is_custom,
            }
        )
    return payloads


def _check_fields(fields: dict[str, Any]) -> None:
    unknown = set(fields) - _EDITABLE_FIELDS
    if unknown:
        raise ValueError(f"Unknown service fields: {', '.join(sorted(unknown))}")


def _coerce_prices(fields: dict[str, Any]) -> dict[str, Any]:
    values = dict(fields)
    for key in ("price_min", "price_max"):
        if key in values and values[key] is not None:
            values[key] = parse_price(values[key])
    return values
