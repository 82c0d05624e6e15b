import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8050
DEFAULT_OUTPUT_DIR = "outputs"


@dataclass(frozen=True)
class Settings:
    host: str
    port: int
    output_dir: Path
    charts_dir: Path
    tables_dir: Path
    stress_test: bool


def build_settings(output_dir: str, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT, stress_test: bool = False) -> Settings:
    out = Path(output_dir)
    return Settings(
        host=host,
        port=int(port),
        output_dir=out,
        charts_dir=out / "charts",
        tables_dir=out / "tables",
        stress_test=stress_test,
    )


def load_env_file() -> None:
    """Load .env from the working directory, else from beside the scripts."""
    cwd_env = Path.cwd() / ".env"
    script_env = Path(__file__).resolve().parents[1] / ".env"

    if cwd_env.exists():
        load_dotenv(dotenv_path=cwd_env, override=False)
    elif script_env.exists():
        load_dotenv(dotenv_path=script_env, override=False)


def load_settings(output_dir=None) -> Settings:
    load_env_file()
    output_dir = output_dir or os.getenv("ANALYSIS_OUTPUT_DIR", DEFAULT_OUTPUT_DIR).strip()
    host = os.getenv("DASH_HOST", DEFAULT_HOST).strip()
    port_raw = os.getenv("DASH_PORT", str(DEFAULT_PORT)).strip()
    try:
        port = int(port_raw)
    except ValueError:
        raise ValueError(f"DASH_PORT must be an integer, got {port_raw!r}") from None
    stress_test = os.getenv("DD_STRESS_TEST", "0").strip() == "1"
    return build_settings(output_dir, host=host, port=port, stress_test=stress_test)


def ensure_dirs(s: Settings):
    s.output_dir.mkdir(parents=True, exist_ok=True)
    s.charts_dir.mkdir(parents=True, exist_ok=True)
    s.tables_dir.mkdir(parents=True, exist_ok=True)
