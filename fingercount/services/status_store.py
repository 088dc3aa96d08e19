from dataclasses import dataclass, field
from typing import List

MAX_LOGS = 200


@dataclass
class StatusStore:
    """Shared log buffer; every adapter and the orchestrator write here."""
    logs: List[str] = field(default_factory=list)
    echo: bool = False   # also print each line (terminal runner)

    def log(self, msg: str):
        self.logs.append(msg)
        if len(self.logs) > MAX_LOGS:
            self.logs = self.logs[-MAX_LOGS:]
        if self.echo:
            print(msg, flush=True)

    def tail(self, n: int = 50) -> List[str]:
        return self.logs[-n:]
