"""Per-run recording with CSV/JSONL export."""

import csv
import json
import os
from typing import Any, Dict, List

from .schemas import RunResult


class RunRecorder:
    """Flattens run results into rows and writes them out on request."""

    FIELDS = ("seed", "mode", "n_paths", "chosen_path", "screen_position",
              "which_value", "observation")

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self.rows: List[Dict[str, Any]] = []

    def log(self, result: RunResult):
        """Record one run."""
        if not self.enabled:
            return
        observed = result.observed_trace()
        self.rows.append({
            "seed": result.seed,
            "mode": result.mode.value,
            "n_paths": result.n_paths,
            "chosen_path": -1 if result.chosen_path is None else result.chosen_path,
            "screen_position": float(result.screen_position),
            "which_value": float(result.which_value()),
            "observation": observed[0].text() if observed else "",
        })

    def dump_csv(self, path: str):
        """Dump rows to a CSV file."""
        if not self.enabled or not self.rows:
            return

        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(path, "w", newline="") as f:
            w = csv.DictWriter(f, fieldnames=list(self.FIELDS))
            w.writeheader()
            w.writerows(self.rows)

    def dump_jsonl(self, path: str):
        """Dump rows to a JSONL file."""
        if not self.enabled or not self.rows:
            return

        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(path, "w") as f:
            for row in self.rows:
                f.write(json.dumps(row) + "\n")

    def get_recent(self, n: int = 10) -> List[Dict[str, Any]]:
        """Get the most recent n rows."""
        return self.rows[-n:] if n > 0 else []

    def clear(self):
        self.rows.clear()
