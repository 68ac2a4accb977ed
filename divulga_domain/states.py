from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class StateInfo:
    abbr: str
    name: str


STATES: tuple[StateInfo, ...] = (
    StateInfo("CE", "Ceará"),
    StateInfo("SE", "Sergipe"),
    StateInfo("PA", "Pará"),
    StateInfo("PI", "Piauí"),
    StateInfo("ES", "Espírito Santo"),
    StateInfo("PB", "Paraíba"),
    StateInfo("MA", "Maranhão"),
    StateInfo("GO", "Goiás"),
    StateInfo("AL", "Alagoas"),
    StateInfo("RN", "Rio Grande do Norte"),
)

STATE_ABBRS: tuple[str, ...] = tuple(state.abbr for state in STATES)
STATE_NAMES: dict[str, str] = {state.abbr: state.name for state in STATES}


def is_known_state(abbr: str) -> bool:
    return abbr in STATE_NAMES
