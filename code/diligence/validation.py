"""
validation.py

Data-contract checks for a Scenario.

Hard errors (scenario is not usable)
------------------------------------
1. Exactly five clients
2. Unique adjustment ids and unique client ids
3. At most one simulation adjustment, carrying the reserved id
4. crisis_mode consistent with the presence of the simulation adjustment

Soft warnings (prefixed "[WARNING]", do not invalidate)
-------------------------------------------------------
- Client share outside [0, 100]
- Client shares summing above 100 ("Otros Clientes" is clamped to 0)
- Zero revenue (margin is N/A, stress test uses the fallback margin)
"""

from __future__ import annotations

from typing import Tuple

from .constants import CLIENT_COUNT, OTHER_CLIENTS_LABEL, SIMULATION_ADJUSTMENT_ID


class ScenarioValidationError(Exception):
    """Raised when a scenario or an update to it breaks the data contract."""
    pass


def _duplicates(ids) -> list[str]:
    seen, dupes = set(), []
    for i in ids:
        if i in seen and i not in dupes:
            dupes.append(i)
        seen.add(i)
    return dupes


def validate_scenario(scenario) -> Tuple[bool, list[str]]:
    """
    Validate a Scenario against its data contract.

    Returns:
        (is_valid, messages)
    """
    errors = []

    # 1. Client count
    if len(scenario.clients) != CLIENT_COUNT:
        errors.append(f"Expected {CLIENT_COUNT} clients, found {len(scenario.clients)}")

    # 2. Unique ids
    dup_adj = _duplicates(a.id for a in scenario.adjustments)
    if dup_adj:
        errors.append(f"Duplicate adjustment ids: {dup_adj}")
    dup_clients = _duplicates(c.id for c in scenario.clients)
    if dup_clients:
        errors.append(f"Duplicate client ids: {dup_clients}")

    # 3. Simulation entries
    simulations = [a for a in scenario.adjustments if a.is_simulation]
    if len(simulations) > 1:
        errors.append(f"Found {len(simulations)} simulation adjustments (at most 1 allowed)")
    for sim in simulations:
        if sim.id != SIMULATION_ADJUSTMENT_ID:
            errors.append(f"Simulation adjustment has id {sim.id!r}, expected {SIMULATION_ADJUSTMENT_ID!r}")

    # 4. Crisis flag consistency
    if scenario.crisis_mode and not simulations:
        errors.append("crisis_mode is set but no simulation adjustment exists")
    if simulations and not scenario.crisis_mode:
        errors.append("Simulation adjustment present while crisis_mode is off")

    # Soft checks
    out_of_range = [c.id for c in scenario.clients if c.share < 0 or c.share > 100]
    if out_of_range:
        errors.append(f"[WARNING] Client shares outside [0, 100]: {out_of_range}")

    total_share = sum(c.share for c in scenario.clients)
    if total_share > 100:
        errors.append(
            f"[WARNING] Client shares sum to {total_share:g}% (> 100%); "
            f"{OTHER_CLIENTS_LABEL} shown as 0%"
        )

    if not scenario.working_capital.revenue:
        errors.append("[WARNING] Revenue is zero: margin not applicable, stress test uses fallback margin")

    is_valid = len([e for e in errors if not e.startswith("[WARNING]")]) == 0
    return is_valid, errors


def require_valid(scenario) -> list[str]:
    """Raise ScenarioValidationError on hard errors; return warnings otherwise."""
    is_valid, errors = validate_scenario(scenario)
    if not is_valid:
        raise ScenarioValidationError(
            "Scenario validation failed:\n" + "\n".join(errors)
        )
    return errors
