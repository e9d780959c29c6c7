# tests/test_config.py
import re
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]


def _documented_settings():
    names = set()
    for line in (ROOT / ".env.example").read_text().splitlines():
        m = re.match(r"#?\s*([A-Z][A-Z0-9_]*)=", line.strip())
        if m:
            names.add(m.group(1))
    return names

def _read_settings():
    names = set()
    for path in (ROOT / "democracy_lens").rglob("*.py"):
        names.update(re.findall(r'os\.getenv\("([A-Z][A-Z0-9_]*)"', path.read_text()))
    return names

def test_env_example_lists_every_setting():
    read = _read_settings()
    assert {"LOG_DIR", "LOG_LEVEL", "LOG_FORMAT", "LOG_TO_FILE", "DB_URL"} <= read
    assert read - _documented_settings() == set()
