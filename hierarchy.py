# hierarchy.py
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from schemas import CountyPath, HierarchyDiagnostics, PickerRow, Place, Region, State

logger = logging.getLogger(__name__)

def parse_places(raw: Any) -> Tuple[List[Place], int]:
    """Registros inválidos (nível desconhecido, sem id, ...) são descartados e contados."""
    if not isinstance(raw, list):
        return [], 0
    places, bad = [], 0
    for item in raw:
        try:
            places.append(Place.model_validate(item))
        except ValidationError:
            bad += 1
    return places, bad

def build_hierarchy(
    places: Sequence[Place],
    diagnostics: Optional[HierarchyDiagnostics] = None,
) -> List[Region]:
    """
    Monta região -> estados -> condados a partir da lista plana.
    Não poda: regiões/estados sem filhos ficam com listas vazias.
    Filhos com pai inexistente não aparecem na árvore.
    """
    regions = [p for p in places if p.level == "region"]
    states = [p for p in places if p.level == "state"]
    counties = [p for p in places if p.level == "county"]

    counties_by_state: Dict[int, List[Place]] = {}
    for c in counties:
        counties_by_state.setdefault(c.parent, []).append(c)

    states_by_region: Dict[int, List[State]] = {}
    for s in states:
        state = State(**s.model_dump(), counties=counties_by_state.get(s.id, []))
        states_by_region.setdefault(s.parent, []).append(state)

    tree = [Region(**r.model_dump(), states=states_by_region.get(r.id, [])) for r in regions]

    region_ids = {r.id for r in regions}
    state_ids = {s.id for s in states if s.parent in region_ids}
    orphan_states = sum(1 for s in states if s.parent not in region_ids)
    orphan_counties = sum(1 for c in counties if c.parent not in state_ids)
    if diagnostics is not None:
        diagnostics.orphan_states += orphan_states
        diagnostics.orphan_counties += orphan_counties
    if orphan_states or orphan_counties:
        logger.warning(
            "hierarchy: %d states and %d counties dropped (dangling parent)",
            orphan_states, orphan_counties,
        )
    return tree

def filter_hierarchy(tree: List[Region], query: str) -> List[Region]:
    """Poda estrutural: mantém só os ramos com ao menos um condado que casa com a busca."""
    if not query:
        return tree

    needle = query.lower()
    out: List[Region] = []
    for region in tree:
        new_states: List[State] = []
        for state in region.states:
            matches = [c for c in state.counties if needle in c.name.lower()]
            if not matches:
                continue
            new_states.append(state.model_copy(update={"counties": matches}))
        if not new_states:
            continue
        out.append(region.model_copy(update={"states": new_states}))
    return out

def index_counties(tree: Sequence[Region]) -> Dict[int, CountyPath]:
    # mapa explícito id -> condado (ids podem ser esparsos ou grandes)
    index: Dict[int, CountyPath] = {}
    for region in tree:
        for state in region.states:
            for county in state.counties:
                index[county.id] = CountyPath(region=region, state=state, county=county)
    return index

def picker_rows(tree: Sequence[Region]) -> List[PickerRow]:
    rows: List[PickerRow] = []
    for region in tree:
        rows.append(PickerRow(level="region", id=region.id, name=region.name, depth=0))
        for state in region.states:
            rows.append(PickerRow(level="state", id=state.id, name=state.name, depth=1))
            for county in state.counties:
                rows.append(PickerRow(level="county", id=county.id, name=county.name, depth=2))
    return rows

def selected_row(rows: Sequence[PickerRow], county_id: Optional[int]) -> Optional[int]:
    """Posição da linha do condado selecionado (para rolar a lista até ele)."""
    if county_id is None:
        return None
    positions = {r.id: i for i, r in enumerate(rows) if r.level == "county"}
    return positions.get(county_id)
