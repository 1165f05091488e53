from pathlib import Path

base_dir = Path(__file__).resolve().parent.parent

templates_dir = base_dir / "templates"
