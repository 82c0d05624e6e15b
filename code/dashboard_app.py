#!/usr/bin/env python3
"""
dashboard_app.py

Dash dashboard for due-diligence analysis of a target company.

Tabs
- Calidad EBITDA: reported vs normalized EBITDA, editable adjustments, bridge chart
- Ciclo de Caja (NOF): DSO/DIO/DPO sliders, NOF current vs 10% efficiency scenario
- Riesgo Clientes: top-5 concentration and the top-client kill switch

State model
- The whole scenario lives in one dcc.Store as Scenario.to_dict().
- A single reducer callback turns UI events into scenario actions.
- Render callbacks read only the store and derive_metrics(), so no view ever
  sees a half-applied edit.

Env
- DASH_HOST (optional): default 127.0.0.1
- DASH_PORT (optional): default 8050
- DD_STRESS_TEST (optional): 1 to start with the kill switch active
"""

from __future__ import annotations

from pathlib import Path
from typing import List

from dash import ALL, Dash, Input, Output, State, ctx, dash_table, dcc, html, no_update

from diligence.charts import (
    COLORS,
    CLIENT_COLORS,
    FONT_STACK,
    build_concentration_figure,
    build_nof_figure,
    build_waterfall_figure,
)
from diligence.config import load_settings
from diligence.formatting import format_currency, format_days, format_percent, parse_number
from diligence.scenario import (
    AddAdjustment,
    DeleteAdjustment,
    Scenario,
    SetAdjustmentDescription,
    SetAdjustmentValue,
    SetReportedEbitda,
    ToggleStressTest,
    UpdateClientShare,
    UpdateWorkingCapital,
    activate_stress_test,
    default_scenario,
    derive_metrics,
    reduce_scenario,
)
from diligence.validation import ScenarioValidationError, require_valid

INTER_STYLESHEET = "https://fonts.googleapis.com/css2?family=Inter:wght@300;400;500;600;700&display=swap"

SIMULATION_TAG = "Simulación"

WC_CONTROLS = ("dso", "dio", "dpo", "revenue", "gross_margin")
WC_INPUT_IDS = tuple(f"wc_{c}" for c in WC_CONTROLS)

TABS = [
    ("ebitda", "Calidad EBITDA"),
    ("treasury", "Ciclo de Caja (NOF)"),
    ("clients", "Riesgo Clientes"),
]


# ======================================================
# EVENT -> ACTION TRANSLATION
# ======================================================

def _editable(scenario: Scenario):
    return [a for a in scenario.adjustments if not a.is_simulation]


def adjustment_rows(scenario: Scenario) -> List[dict]:
    """Rows for the editable table. Simulation adjustments never appear here."""
    return [
        {"id": a.id, "description": a.description, "value": a.value}
        for a in _editable(scenario)
    ]


def simulation_rows(scenario: Scenario) -> List[html.Div]:
    return [
        html.Div([
            html.Span(a.description, className="sim-description"),
            html.Span(format_currency(a.value), className="sim-value"),
            html.Span(SIMULATION_TAG, className="sim-tag"),
        ], className="simulation-row")
        for a in scenario.simulation_adjustments
    ]


def table_edit_actions(scenario: Scenario, rows) -> list:
    """
    Diff edited table rows against the editable adjustments.

    Missing rows become deletes; changed cells become typed edits. Rows whose
    id is not an editable adjustment are ignored.
    """
    rows = rows or []
    actions = []
    editable = _editable(scenario)
    present = {r.get("id") for r in rows}
    for adj in editable:
        if adj.id not in present:
            actions.append(DeleteAdjustment(adj.id))

    current = {a.id: a for a in editable}
    for row in rows:
        adj = current.get(row.get("id"))
        if adj is None:
            continue
        description = row.get("description")
        if description is not None and description != adj.description:
            actions.append(SetAdjustmentDescription(adj.id, str(description)))
        value = parse_number(row.get("value"), 0)
        if value != adj.value:
            actions.append(SetAdjustmentValue(adj.id, value))
    return actions


def apply_actions(scenario: Scenario, actions) -> Scenario:
    for action in actions:
        scenario = reduce_scenario(scenario, action)
    return scenario


def working_capital_action(scenario: Scenario, control: str, raw) -> UpdateWorkingCapital:
    previous = getattr(scenario.working_capital, control)
    return UpdateWorkingCapital({control: parse_number(raw, previous)})


def client_share_action(scenario: Scenario, client_id: str, shares) -> UpdateClientShare | None:
    for client, raw in zip(scenario.clients, shares or []):
        if client.id == client_id:
            return UpdateClientShare(client_id, parse_number(raw, client.share))
    return None


# ======================================================
# LAYOUT HELPERS
# ======================================================

def _kpi_tile(label: str, display: str, subtitle: str = "", value_color: str = None) -> html.Div:
    children = [
        html.Div(label, style={
            "fontSize": "11px",
            "color": COLORS["muted_text"],
            "fontWeight": "600",
            "textTransform": "uppercase",
            "letterSpacing": "0.5px",
            "marginBottom": "4px",
        }),
        html.Div(display, style={
            "fontSize": "28px",
            "fontWeight": "700",
            "color": value_color or COLORS["dark_text"],
            "lineHeight": "1.1",
        }),
    ]
    if subtitle:
        children.append(html.Div(subtitle, style={
            "fontSize": "10px",
            "color": COLORS["neutral"],
            "marginTop": "6px",
            "fontStyle": "italic",
        }))
    return html.Div(children, className="kpi-tile")


def _signed_color(value: float) -> str:
    return COLORS["positive"] if value >= 0 else COLORS["negative"]


def _kpi_strip(metrics) -> List[html.Div]:
    return [
        _kpi_tile("EBITDA Normalizado", format_currency(metrics.normalized_ebitda), value_color=COLORS["highlight"]),
        _kpi_tile("Margen Real", format_percent(metrics.real_margin), subtitle="sobre ventas"),
        _kpi_tile(
            "Ajustes Netos",
            format_currency(metrics.net_adjustments),
            value_color=_signed_color(metrics.net_adjustments),
        ),
    ]


def _slider(control: str, label: str, lo: int, hi: int, value: float) -> html.Div:
    return html.Div([
        html.Label(label, className="control-label"),
        dcc.Slider(
            id=f"wc_{control}",
            min=lo,
            max=hi,
            step=1,
            value=value,
            marks=None,
            tooltip={"placement": "bottom", "always_visible": True},
        ),
    ], className="control-card")


def _number_input(control: str, label: str, value: float) -> html.Div:
    return html.Div([
        html.Label(label, className="control-label"),
        dcc.Input(id=f"wc_{control}", type="number", value=value, debounce=True, className="number-input"),
    ], className="control-card")


def _ebitda_tab(scenario: Scenario) -> html.Div:
    return html.Div([
        html.Div([
            html.Div([
                html.Div("EBITDA Reportado", className="control-label"),
                dcc.Input(
                    id="reported_ebitda",
                    type="number",
                    value=scenario.reported_ebitda,
                    debounce=True,
                    className="number-input",
                ),
            ], className="kpi-tile kpi-reported"),
            html.Div(id="kpi_tiles", style={"display": "contents"}),
        ], className="kpi-grid"),

        html.Div([
            html.Div([
                html.Div([
                    html.H3("Detalle de Ajustes", className="section-heading"),
                    html.Button("Añadir", id="add_adjustment", n_clicks=0, className="btn-primary"),
                ], style={"display": "flex", "justifyContent": "space-between", "alignItems": "center"}),
                dash_table.DataTable(
                    id="adjustments_table",
                    columns=[
                        {"name": "Descripción", "id": "description", "editable": True},
                        {"name": "Valor (€)", "id": "value", "type": "numeric", "editable": True,
                         "on_change": {"action": "coerce", "failure": "default"}},
                    ],
                    data=adjustment_rows(scenario),
                    row_deletable=True,
                    style_cell={"fontFamily": FONT_STACK, "fontSize": "13px", "padding": "6px"},
                    style_cell_conditional=[{"if": {"column_id": "value"}, "textAlign": "right"}],
                    style_data_conditional=[
                        {"if": {"filter_query": "{value} < 0", "column_id": "value"}, "color": COLORS["negative"]},
                        {"if": {"filter_query": "{value} >= 0", "column_id": "value"}, "color": COLORS["positive"]},
                    ],
                    style_header={"fontWeight": "700", "textTransform": "uppercase", "fontSize": "11px"},
                ),
                html.Div(simulation_rows(scenario), id="simulation_rows"),
            ], className="card-chart"),
            html.Div([
                dcc.Graph(id="waterfall_chart", style={"height": "450px"}, config={"responsive": True}),
                html.Div(id="crisis_banner"),
            ], className="card-chart"),
        ], className="chart-grid"),
    ])


def _treasury_tab(scenario: Scenario) -> html.Div:
    wc = scenario.working_capital
    return html.Div([
        html.Div([
            _slider("dso", "DSO (Cobro)", 15, 150, wc.dso),
            _slider("dio", "DIO (Stock)", 0, 120, wc.dio),
            _slider("dpo", "DPO (Pago)", 15, 150, wc.dpo),
            _number_input("revenue", "Ventas Anuales (€)", wc.revenue),
            _number_input("gross_margin", "Margen Bruto (%)", wc.gross_margin),
        ], className="kpi-grid"),
        html.Div([
            html.Div([
                dcc.Graph(id="nof_chart", style={"height": "320px"}, config={"responsive": True}),
            ], className="card-chart"),
            html.Div([
                html.Div(id="cycle_alert"),
                html.Div(id="savings_card", className="card-highlight"),
            ]),
        ], className="chart-grid"),
    ])


def _clients_tab(scenario: Scenario) -> html.Div:
    rows = []
    for idx, client in enumerate(scenario.clients):
        rows.append(html.Div([
            html.Span([
                html.Span(className="dot", style={"backgroundColor": CLIENT_COLORS[idx % len(CLIENT_COLORS)]}),
                client.name,
            ]),
            dcc.Input(
                id={"type": "client_share", "index": client.id},
                type="number",
                value=client.share,
                debounce=True,
                className="share-input",
            ),
        ], className="client-row"))

    return html.Div([
        html.Div([
            html.H3("Top 5 Clientes (% Ventas)", className="section-heading"),
            *rows,
            html.Div(id="other_clients", className="client-row client-other"),
        ], className="card-chart"),
        html.Div([
            html.Div([
                dcc.Graph(id="concentration_chart", style={"height": "300px"}, config={"responsive": True}),
            ], className="card-chart"),
            html.Div([
                html.H4("Stress Test: Pérdida Cliente Principal"),
                html.P(id="kill_switch_text"),
                html.Button(id="kill_switch", n_clicks=0),
            ], className="card-dark"),
        ]),
    ], className="chart-grid")


# ======================================================
# APP
# ======================================================

def build_app(scenario: Scenario | None = None, host: str = "127.0.0.1", port: int = 8050):
    scenario = scenario or default_scenario()

    assets_path = Path(__file__).resolve().parent / "assets"
    css_file = assets_path / "dashboard.css"
    if css_file.exists():
        print(f"[OK] CSS file found: {css_file} ({css_file.stat().st_size} bytes)")
    else:
        print(f"[WARNING] dashboard.css not found at: {css_file}")
    print(f"[INFO] Dashboard at http://{host}:{port}")

    app = Dash(
        __name__,
        external_stylesheets=[INTER_STYLESHEET],
        assets_folder=str(assets_path),
        suppress_callback_exceptions=False,
    )
    app.title = "Due Diligence Analyzer 360º"

    app.layout = html.Div(
        [
            dcc.Store(id="scenario_store", data=scenario.to_dict()),

            html.Div([
                html.H1("Due Diligence Analyzer 360º", style={
                    "color": COLORS["bg_primary"],
                    "fontSize": "24px",
                    "fontWeight": "700",
                    "margin": "0",
                }),
                html.Div("EBITDA • Ciclo de Caja • Riesgo de Clientes", style={
                    "color": COLORS["neutral"],
                    "fontSize": "12px",
                    "marginTop": "4px",
                }),
            ], style={
                "backgroundColor": COLORS["total"],
                "padding": "16px 24px",
            }),

            dcc.Tabs(
                id="tabs",
                value="ebitda",
                children=[
                    dcc.Tab(label=TABS[0][1], value=TABS[0][0], children=_ebitda_tab(scenario)),
                    dcc.Tab(label=TABS[1][1], value=TABS[1][0], children=_treasury_tab(scenario)),
                    dcc.Tab(label=TABS[2][1], value=TABS[2][0], children=_clients_tab(scenario)),
                ],
            ),
        ],
        style={"fontFamily": FONT_STACK},
        className="app-root",
    )

    # ---------- reducer ----------
    @app.callback(
        Output("scenario_store", "data"),
        Output("adjustments_table", "data"),
        Output("tabs", "value"),
        Input("reported_ebitda", "value"),
        Input("add_adjustment", "n_clicks"),
        Input("adjustments_table", "data"),
        Input("wc_dso", "value"),
        Input("wc_dio", "value"),
        Input("wc_dpo", "value"),
        Input("wc_revenue", "value"),
        Input("wc_gross_margin", "value"),
        Input({"type": "client_share", "index": ALL}, "value"),
        Input("kill_switch", "n_clicks"),
        State("scenario_store", "data"),
        prevent_initial_call=True,
    )
    def on_event(reported, _add, rows, dso, dio, dpo, revenue, gross_margin, shares, _kill, data):
        current = Scenario.from_dict(data)
        trigger = ctx.triggered_id
        tab = no_update

        if trigger == "reported_ebitda":
            actions = [SetReportedEbitda(parse_number(reported, 0))]
        elif trigger == "add_adjustment":
            actions = [AddAdjustment()]
        elif trigger == "adjustments_table":
            actions = table_edit_actions(current, rows)
        elif trigger in WC_INPUT_IDS:
            control = trigger[len("wc_"):]
            raw = {"dso": dso, "dio": dio, "dpo": dpo, "revenue": revenue, "gross_margin": gross_margin}[control]
            actions = [working_capital_action(current, control, raw)]
        elif isinstance(trigger, dict) and trigger.get("type") == "client_share":
            action = client_share_action(current, trigger["index"], shares)
            actions = [action] if action else []
        elif trigger == "kill_switch":
            actions = [ToggleStressTest()]
        else:
            actions = []

        updated = apply_actions(current, actions)
        if updated.crisis_mode and not current.crisis_mode:
            tab = "ebitda"
        return updated.to_dict(), adjustment_rows(updated), tab

    # ---------- EBITDA views ----------
    @app.callback(
        Output("kpi_tiles", "children"),
        Output("waterfall_chart", "figure"),
        Output("crisis_banner", "children"),
        Output("simulation_rows", "children"),
        Input("scenario_store", "data"),
    )
    def refresh_ebitda(data):
        scenario_now = Scenario.from_dict(data)
        metrics = derive_metrics(scenario_now)
        banner = ""
        if scenario_now.crisis_mode:
            banner = html.Div([
                html.Strong("Modo Crisis Activo: "),
                "Se ha simulado la pérdida del cliente principal. "
                "El gráfico muestra el impacto negativo directo en la valoración.",
            ], className="banner-danger")
        return (
            _kpi_strip(metrics),
            build_waterfall_figure(metrics.waterfall),
            banner,
            simulation_rows(scenario_now),
        )

    # ---------- treasury views ----------
    @app.callback(
        Output("nof_chart", "figure"),
        Output("cycle_alert", "children"),
        Output("savings_card", "children"),
        Input("scenario_store", "data"),
    )
    def refresh_treasury(data):
        metrics = derive_metrics(Scenario.from_dict(data))
        alert = ""
        if metrics.cycle_alert:
            alert = html.Div([
                html.H4("Alerta de Tesorería"),
                html.P(
                    f"El Ciclo de Caja ({format_days(metrics.cycle_days)}) es elevado. "
                    "La empresa financia operaciones durante 2 meses antes de cobrar."
                ),
            ], className="banner-danger")
        savings = [
            html.H4("Oportunidad de Optimización"),
            html.P("Mejorando un 10% la gestión de cobros, stock y pagos, se liberarían:"),
            html.Div(format_currency(metrics.cash_savings), className="savings-value"),
            html.Div("Cash Flow Adicional Inmediato", className="control-label"),
        ]
        return build_nof_figure(metrics), alert, savings

    # ---------- client views ----------
    @app.callback(
        Output("concentration_chart", "figure"),
        Output("other_clients", "children"),
        Output("kill_switch_text", "children"),
        Output("kill_switch", "children"),
        Output("kill_switch", "className"),
        Input("scenario_store", "data"),
    )
    def refresh_clients(data):
        scenario_now = Scenario.from_dict(data)
        metrics = derive_metrics(scenario_now)
        other = [html.Span("Otros Clientes"), html.Span(f"{metrics.other_clients_share:g}%")]
        text = (
            "Simula el impacto financiero inmediato en el EBITDA si "
            f"\"{scenario_now.top_client.name}\" rescinde el contrato mañana."
        )
        if scenario_now.crisis_mode:
            label, cls = "RESTAURAR ESCENARIO BASE", "btn-danger"
        else:
            label, cls = "ACTIVAR KILL SWITCH", "btn-light"
        fig = build_concentration_figure(scenario_now.clients, metrics.other_clients_share)
        return fig, other, text, label, cls

    return app


def main():
    s = load_settings()

    scenario = default_scenario()
    if s.stress_test:
        scenario = activate_stress_test(scenario)

    try:
        warnings = require_valid(scenario)
    except ScenarioValidationError as e:
        print(f"[ERROR] {e}")
        raise
    for w in warnings:
        print(f"  {w}")

    app = build_app(scenario, host=s.host, port=s.port)
    app.run(debug=False, host=s.host, port=s.port)


if __name__ == "__main__":
    main()
