"""Step tracking for install/remove/uninstall sequences.

Coordinators record every step they finish so that a sequence aborted by an
error can still report what was applied before the failure.
"""

from __future__ import annotations

from rich.tree import Tree


class StepTracker:
    """Track and render ordered steps with Rich trees."""

    def __init__(self, title: str):
        self.title = title
        self.steps = []  # list of dicts: {key, label, status, detail}

    def add(self, key: str, label: str):
        if key not in [s["key"] for s in self.steps]:
            self.steps.append({"key": key, "label": label, "status": "pending", "detail": ""})

    def complete(self, key: str, detail: str = ""):
        self._update(key, status="done", detail=detail)

    def skip(self, key: str, detail: str = ""):
        self._update(key, status="skipped", detail=detail)

    def _update(self, key: str, status: str, detail: str):
        for s in self.steps:
            if s["key"] == key:
                s["status"] = status
                if detail:
                    s["detail"] = detail
                return
        # If not present, add it
        self.steps.append({"key": key, "label": key, "status": status, "detail": detail})

    def done(self, key: str, label: str, detail: str = "") -> None:
        """Add *key* and mark it complete in one call."""
        self.add(key, label)
        self.complete(key, detail)

    def render(self) -> Tree:
        tree = Tree(f"[cyan]{self.title}[/cyan]", guide_style="grey50")
        for step in self.steps:
            label = step["label"]
            detail_text = step["detail"].strip() if step["detail"] else ""

            status = step["status"]
            if status == "done":
                symbol = "[green]●[/green]"
            elif status == "skipped":
                symbol = "[yellow]○[/yellow]"
            else:
                symbol = "[green dim]○[/green dim]"

            if status == "pending":
                line = f"{symbol} [bright_black]{label}[/bright_black]"
            elif detail_text:
                line = f"{symbol} [white]{label}[/white] [bright_black]({detail_text})[/bright_black]"
            else:
                line = f"{symbol} [white]{label}[/white]"

            tree.add(line)
        return tree

