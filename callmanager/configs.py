from pathlib import Path

ROOT_DIR: Path = Path(__file__).parent
LOG_DIR: Path = ROOT_DIR / "logs"
