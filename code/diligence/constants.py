"""
Initial scenario data and policy constants.
"""

COMMERCIAL_YEAR_DAYS = 360

# 10% efficiency scenario: collect faster, hold less stock, pay later
OPTIMIZATION_DSO_FACTOR = 0.9
OPTIMIZATION_DIO_FACTOR = 0.9
OPTIMIZATION_DPO_FACTOR = 1.1

# Stress-test margin when the normalized margin is not positive (heuristic)
FALLBACK_MARGIN = 0.15

CASH_CYCLE_ALERT_DAYS = 60

SIMULATION_ADJUSTMENT_ID = "sim-crisis"
SIMULATION_DESCRIPTION_PREFIX = "Pérdida"
NEW_ADJUSTMENT_DESCRIPTION = "Nuevo Ajuste"

CLIENT_COUNT = 5
OTHER_CLIENTS_LABEL = "Otros Clientes"

INITIAL_REPORTED_EBITDA = 5000000

INITIAL_ADJUSTMENTS = [
    ("1", "Indemnizaciones Extraordinarias", 250000),
    ("2", "Reparaciones No Recurrentes", 120000),
    ("3", "Ajuste de Alquileres (Mercado)", -85000),
    ("4", "Gastos Personales Socios", 150000),
]

INITIAL_CLIENTS = [
    ("c1", "Cliente Alpha (Principal)", 35),
    ("c2", "Grupo Beta", 15),
    ("c3", "Industrias Gamma", 10),
    ("c4", "Distribuciones Delta", 8),
    ("c5", "Logística Epsilon", 5),
]

INITIAL_WORKING_CAPITAL = {
    "dso": 65,
    "dio": 30,
    "dpo": 45,
    "revenue": 25000000,
    "gross_margin": 40,  # 60% COGS
}
