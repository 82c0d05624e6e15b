"""
scenario.py

Analyst scenario state and its reducers.

A Scenario is an immutable value. Every edit is expressed as an action and
applied by reduce_scenario(scenario, action) -> new Scenario; derived values
are recomputed from scratch by derive_metrics(scenario). Nothing is held in
module-level state.

Rejected edits (unknown id, edits or deletes aimed at the stress-test
adjustment) return the scenario unchanged.
"""

from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass, field, replace
from typing import Callable, Mapping, Optional, Tuple

from .constants import (
    INITIAL_ADJUSTMENTS,
    INITIAL_CLIENTS,
    INITIAL_REPORTED_EBITDA,
    INITIAL_WORKING_CAPITAL,
    NEW_ADJUSTMENT_DESCRIPTION,
    SIMULATION_ADJUSTMENT_ID,
    SIMULATION_DESCRIPTION_PREFIX,
)
from .formulas import (
    OptimizedDays,
    cash_cycle_alert,
    cash_savings,
    cycle_days,
    estimated_margin_fraction,
    net_operating_funds,
    normalized_ebitda,
    optimized_days,
    other_clients_share,
    real_margin,
    stress_test_impact,
)
from .validation import ScenarioValidationError
from .waterfall import WaterfallBar, build_waterfall


# ======================================================
# STATE
# ======================================================

@dataclass(frozen=True)
class Adjustment:
    id: str
    description: str
    value: float
    is_simulation: bool = False


@dataclass(frozen=True)
class Client:
    id: str
    name: str
    share: float  # percentage of revenue


@dataclass(frozen=True)
class WorkingCapitalState:
    dso: float
    dio: float
    dpo: float
    revenue: float
    gross_margin: float  # percentage


WORKING_CAPITAL_FIELDS = ("dso", "dio", "dpo", "revenue", "gross_margin")


@dataclass(frozen=True)
class Scenario:
    reported_ebitda: float
    adjustments: Tuple[Adjustment, ...]
    working_capital: WorkingCapitalState
    clients: Tuple[Client, ...]
    crisis_mode: bool = False

    @property
    def top_client(self) -> Client:
        return self.clients[0]

    @property
    def simulation_adjustments(self) -> Tuple[Adjustment, ...]:
        return tuple(a for a in self.adjustments if a.is_simulation)

    def to_dict(self) -> dict:
        d = asdict(self)
        d["adjustments"] = list(d["adjustments"])
        d["clients"] = list(d["clients"])
        return d

    @classmethod
    def from_dict(cls, data: Mapping) -> "Scenario":
        try:
            return cls(
                reported_ebitda=data["reported_ebitda"],
                adjustments=tuple(
                    Adjustment(
                        id=str(a["id"]),
                        description=a["description"],
                        value=a["value"],
                        is_simulation=bool(a.get("is_simulation", False)),
                    )
                    for a in data["adjustments"]
                ),
                working_capital=WorkingCapitalState(
                    **{k: data["working_capital"][k] for k in WORKING_CAPITAL_FIELDS}
                ),
                clients=tuple(
                    Client(id=str(c["id"]), name=c["name"], share=c["share"])
                    for c in data["clients"]
                ),
                crisis_mode=bool(data.get("crisis_mode", False)),
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise ScenarioValidationError(f"Malformed scenario payload: {e!r}") from e


def default_scenario() -> Scenario:
    """Scenario preloaded with the sample company used by the dashboard."""
    return Scenario(
        reported_ebitda=INITIAL_REPORTED_EBITDA,
        adjustments=tuple(Adjustment(i, d, v) for i, d, v in INITIAL_ADJUSTMENTS),
        working_capital=WorkingCapitalState(**INITIAL_WORKING_CAPITAL),
        clients=tuple(Client(i, n, s) for i, n, s in INITIAL_CLIENTS),
        crisis_mode=False,
    )


# ======================================================
# ACTIONS
# ======================================================

@dataclass(frozen=True)
class SetReportedEbitda:
    amount: float


@dataclass(frozen=True)
class AddAdjustment:
    description: str = NEW_ADJUSTMENT_DESCRIPTION
    value: float = 0


@dataclass(frozen=True)
class SetAdjustmentDescription:
    id: str
    description: str


@dataclass(frozen=True)
class SetAdjustmentValue:
    id: str
    value: float


@dataclass(frozen=True)
class DeleteAdjustment:
    id: str


@dataclass(frozen=True)
class UpdateWorkingCapital:
    fields: Mapping[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class UpdateClientShare:
    id: str
    share: float


@dataclass(frozen=True)
class ActivateStressTest:
    pass


@dataclass(frozen=True)
class DeactivateStressTest:
    pass


@dataclass(frozen=True)
class ToggleStressTest:
    pass


def new_adjustment_id() -> str:
    return uuid.uuid4().hex[:9]


# ======================================================
# REDUCERS
# ======================================================

def _fresh_id(scenario: Scenario, id_factory: Callable[[], str]) -> str:
    taken = {a.id for a in scenario.adjustments} | {SIMULATION_ADJUSTMENT_ID}
    new_id = id_factory()
    while new_id in taken:
        new_id = id_factory()
    return new_id


def _edit_adjustment(scenario: Scenario, adj_id: str, **changes) -> Scenario:
    target = next((a for a in scenario.adjustments if a.id == adj_id), None)
    if target is None or target.is_simulation:
        return scenario
    return replace(
        scenario,
        adjustments=tuple(replace(a, **changes) if a.id == adj_id else a for a in scenario.adjustments),
    )


def _set_reported(scenario, action, id_factory):
    return replace(scenario, reported_ebitda=action.amount)


def _add(scenario, action, id_factory):
    adj = Adjustment(_fresh_id(scenario, id_factory), action.description, action.value)
    return replace(scenario, adjustments=scenario.adjustments + (adj,))


def _set_description(scenario, action, id_factory):
    return _edit_adjustment(scenario, action.id, description=action.description)


def _set_value(scenario, action, id_factory):
    return _edit_adjustment(scenario, action.id, value=action.value)


def _delete(scenario, action, id_factory):
    kept = tuple(a for a in scenario.adjustments if a.id != action.id or a.is_simulation)
    if len(kept) == len(scenario.adjustments):
        return scenario
    return replace(scenario, adjustments=kept)


def _update_wc(scenario, action, id_factory):
    unknown = sorted(set(action.fields) - set(WORKING_CAPITAL_FIELDS))
    if unknown:
        raise ScenarioValidationError(f"Unknown working capital fields: {unknown}")
    return replace(scenario, working_capital=replace(scenario.working_capital, **action.fields))


def _update_share(scenario, action, id_factory):
    if not any(c.id == action.id for c in scenario.clients):
        return scenario
    return replace(
        scenario,
        clients=tuple(replace(c, share=action.share) if c.id == action.id else c for c in scenario.clients),
    )


def _activate(scenario, action, id_factory):
    if scenario.crisis_mode or scenario.simulation_adjustments:
        return scenario

    top = scenario.top_client
    margin = real_margin(
        normalized_ebitda(scenario.reported_ebitda, scenario.adjustments),
        scenario.working_capital.revenue,
    )
    impact = stress_test_impact(
        scenario.working_capital.revenue,
        top.share,
        estimated_margin_fraction(margin),
    )
    sim = Adjustment(
        id=SIMULATION_ADJUSTMENT_ID,
        description=f"{SIMULATION_DESCRIPTION_PREFIX} {top.name}",
        value=impact,
        is_simulation=True,
    )
    return replace(scenario, adjustments=scenario.adjustments + (sim,), crisis_mode=True)


def _deactivate(scenario, action, id_factory):
    return replace(
        scenario,
        adjustments=tuple(a for a in scenario.adjustments if not a.is_simulation),
        crisis_mode=False,
    )


def _toggle(scenario, action, id_factory):
    if scenario.crisis_mode:
        return _deactivate(scenario, action, id_factory)
    return _activate(scenario, action, id_factory)


_REDUCERS = {
    SetReportedEbitda: _set_reported,
    AddAdjustment: _add,
    SetAdjustmentDescription: _set_description,
    SetAdjustmentValue: _set_value,
    DeleteAdjustment: _delete,
    UpdateWorkingCapital: _update_wc,
    UpdateClientShare: _update_share,
    ActivateStressTest: _activate,
    DeactivateStressTest: _deactivate,
    ToggleStressTest: _toggle,
}


def reduce_scenario(
    scenario: Scenario,
    action,
    id_factory: Callable[[], str] = new_adjustment_id,
) -> Scenario:
    """Apply one action and return the resulting scenario."""
    try:
        reducer = _REDUCERS[type(action)]
    except KeyError:
        raise ScenarioValidationError(f"Unsupported action: {action!r}") from None
    return reducer(scenario, action, id_factory)


# Convenience wrappers

def set_reported_ebitda(scenario: Scenario, amount: float) -> Scenario:
    return reduce_scenario(scenario, SetReportedEbitda(amount))


def add_adjustment(
    scenario: Scenario,
    description: str = NEW_ADJUSTMENT_DESCRIPTION,
    value: float = 0,
    id_factory: Callable[[], str] = new_adjustment_id,
) -> Scenario:
    return reduce_scenario(scenario, AddAdjustment(description, value), id_factory=id_factory)


def update_adjustment(scenario: Scenario, adj_id: str, field_name: str, value) -> Scenario:
    """
    Route a column edit ("description" / "value") to its typed action.

    Unknown or simulation ids are no-ops; any other field name raises
    ScenarioValidationError.
    """
    if field_name == "description":
        return reduce_scenario(scenario, SetAdjustmentDescription(adj_id, value))
    if field_name == "value":
        return reduce_scenario(scenario, SetAdjustmentValue(adj_id, value))
    raise ScenarioValidationError(f"Adjustment field is not editable: {field_name!r}")


def delete_adjustment(scenario: Scenario, adj_id: str) -> Scenario:
    return reduce_scenario(scenario, DeleteAdjustment(adj_id))


def update_working_capital(scenario: Scenario, **fields) -> Scenario:
    return reduce_scenario(scenario, UpdateWorkingCapital(fields))


def update_client_share(scenario: Scenario, client_id: str, share: float) -> Scenario:
    return reduce_scenario(scenario, UpdateClientShare(client_id, share))


def activate_stress_test(scenario: Scenario) -> Scenario:
    return reduce_scenario(scenario, ActivateStressTest())


def deactivate_stress_test(scenario: Scenario) -> Scenario:
    return reduce_scenario(scenario, DeactivateStressTest())


def toggle_stress_test(scenario: Scenario) -> Scenario:
    return reduce_scenario(scenario, ToggleStressTest())


# ======================================================
# DERIVED VALUES
# ======================================================

@dataclass(frozen=True)
class ScenarioMetrics:
    reported_ebitda: float
    normalized_ebitda: float
    net_adjustments: float
    real_margin: Optional[float]
    current_nof: float
    optimized_nof: float
    optimized_days: OptimizedDays
    cash_savings: float
    cycle_days: float
    cycle_alert: bool
    other_clients_share: float
    waterfall: Tuple[WaterfallBar, ...]


def derive_metrics(scenario: Scenario) -> ScenarioMetrics:
    """Recompute every derived value from a scenario."""
    wc = scenario.working_capital
    normalized = normalized_ebitda(scenario.reported_ebitda, scenario.adjustments)

    opt = optimized_days(wc.dso, wc.dio, wc.dpo)
    current_nof = net_operating_funds(wc.revenue, wc.gross_margin, wc.dso, wc.dio, wc.dpo)
    optimized_nof = net_operating_funds(wc.revenue, wc.gross_margin, opt.dso, opt.dio, opt.dpo)
    days = cycle_days(wc.dso, wc.dio, wc.dpo)

    return ScenarioMetrics(
        reported_ebitda=scenario.reported_ebitda,
        normalized_ebitda=normalized,
        net_adjustments=normalized - scenario.reported_ebitda,
        real_margin=real_margin(normalized, wc.revenue),
        current_nof=current_nof,
        optimized_nof=optimized_nof,
        optimized_days=opt,
        cash_savings=cash_savings(current_nof, optimized_nof),
        cycle_days=days,
        cycle_alert=cash_cycle_alert(days),
        other_clients_share=other_clients_share(c.share for c in scenario.clients),
        waterfall=build_waterfall(scenario.reported_ebitda, scenario.adjustments),
    )
