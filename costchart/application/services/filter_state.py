from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, Mapping, Sequence

from costchart.domain.enums import AggregationMode, Dimension
from costchart.domain.errors import ValidationError

TOP_N_DEFAULT = 10


@dataclass(frozen=True, slots=True)
class Selection:
    selected: tuple[str, ...] = ()
    search: str = ""
    initialized: bool = False

    def visible(self, universe: Iterable[str]) -> list[str]:
        term = self.search.strip().lower()
        if not term:
            return list(universe)
        return [key for key in universe if term in key.lower()]


@dataclass(frozen=True, slots=True)
class FilterState:
    """Selected accounts, months and services plus the aggregation mode.

    Immutable: every operation returns a new state. Search text only narrows
    what is visible and never changes what is selected.
    """

    accounts: Selection = field(default_factory=Selection)
    months: Selection = field(default_factory=Selection)
    services: Selection = field(default_factory=Selection)
    mode: AggregationMode = AggregationMode.SERVICE

    def get(self, dim: Dimension | str) -> Selection:
        return getattr(self, Dimension(dim).value)

    def _with(self, dim: Dimension | str, selection: Selection) -> FilterState:
        return replace(self, **{Dimension(dim).value: selection})

    def toggle(self, dim: Dimension | str, key: str) -> FilterState:
        current = self.get(dim)
        if key in current.selected:
            selected = tuple(k for k in current.selected if k != key)
        else:
            selected = (*current.selected, key)
        return self._with(dim, replace(current, selected=selected))

    def select_all(self, dim: Dimension | str, universe: Sequence[str]) -> FilterState:
        current = self.get(dim)
        return self._with(dim, replace(current, selected=tuple(universe)))

    def clear(self, dim: Dimension | str) -> FilterState:
        current = self.get(dim)
        return self._with(dim, replace(current, selected=()))

    def top(self, ranked: Sequence[str], n: int = TOP_N_DEFAULT) -> FilterState:
        if n < 0:
            raise ValidationError("top n must not be negative", details={"n": n})
        return self._with(Dimension.SERVICES, replace(self.services, selected=tuple(ranked[:n])))

    def set_search(self, dim: Dimension | str, text: str) -> FilterState:
        current = self.get(dim)
        return self._with(dim, replace(current, search=str(text or "")))

    def set_mode(self, mode: AggregationMode | str) -> FilterState:
        try:
            value = AggregationMode(mode)
        except ValueError as exc:
            raise ValidationError(f"unknown aggregation mode: {mode}") from exc
        return replace(self, mode=value)

    def reconcile(self, universes: Mapping[Dimension, Sequence[str]]) -> FilterState:
        """Align selections with the keys currently in the store.

        The first time a dimension sees data, everything is selected. After
        that, only keys that vanished from the universe are dropped, so a new
        upload never undoes a user's deselection.
        """
        state = self
        for dim in Dimension:
            universe = list(universes.get(dim, ()))
            current = state.get(dim)
            if not current.initialized and universe:
                updated = replace(current, selected=tuple(universe), initialized=True)
            else:
                known = set(universe)
                updated = replace(current, selected=tuple(k for k in current.selected if k in known))
            state = state._with(dim, updated)
        return state

    def reset(self) -> FilterState:
        return FilterState()

    def to_payload(self, universes: Mapping[Dimension, Sequence[str]]) -> dict[str, object]:
        payload: dict[str, object] = {"mode": self.mode.value}
        for dim in Dimension:
            selection = self.get(dim)
            universe = list(universes.get(dim, ()))
            payload[dim.value] = {
                "selected": list(selection.selected),
                "search": selection.search,
                "visible": selection.visible(universe),
                "universe": universe,
            }
        return payload
