from pathlib import Path

import pandas as pd

WORKBOOK_NAME = "due_diligence.xlsx"


def save_csv(df, path):
    df.to_csv(path, index=False)


def save_excel(tables, path):
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for name, df in tables.items():
            # Excel caps sheet names at 31 chars
            df.to_excel(writer, sheet_name=name[:31], index=False)


def write_report(tables, tables_dir, output_dir) -> Path:
    """One lowercase CSV per table plus a workbook with one sheet each."""
    tables_dir = Path(tables_dir)
    for name, df in tables.items():
        save_csv(df, tables_dir / f"{name.lower()}.csv")

    workbook = Path(output_dir) / WORKBOOK_NAME
    save_excel(tables, workbook)
    return workbook
