import json
import os
from datetime import datetime, timezone
from typing import Any, Dict


def append_event(path: str, event: Dict[str, Any]):
    """Append one deployment event as a JSON line, stamped with the UTC time."""
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    line = json.dumps({**event, "at": datetime.now(timezone.utc).isoformat()}, sort_keys=True)
    with open(path, "a", encoding="utf-8") as f:
        f.write(line + "\n")
