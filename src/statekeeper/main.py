"""statekeeper console script.

Builds a State from the YAML config, publishes its transitions on an
EventBus and drives it from stdin, one command per line:

    OK                      set_by_name("OK")
    NOT_OK {error: bad}     set_by_name("NOT_OK", {"error": "bad"})
    ?                       print the current state
    quit                    stop (as does EOF)
"""

import logging
import sys
from typing import TextIO

import yaml

from .config import build_state, load_config
from .core.errors import StateError
from .core.event_bus import STATE_CHANGED, EventBus
from .core.logging_config import setup_logging
from .core.state import State

log = logging.getLogger("statekeeper.main")


class StateConsole:
    """Applies console commands to a State."""

    def __init__(self, state: State, out: TextIO = None):
        self.state = state
        self.out = out or sys.stdout
        self.event_bus = EventBus()
        self.event_bus.subscribe(STATE_CHANGED, self._on_state_changed)
        self._stop_watching = self.event_bus.watch(state)

    def _on_state_changed(self, data: dict) -> None:
        log.info("State → %s %s", data["state"], data["context"])

    def execute(self, line: str) -> bool:
        """Run one command. Returns False when the console should stop."""
        line = line.strip()
        if not line or line.startswith("#"):
            return True
        if line == "quit":
            return False
        if line == "?":
            print(f"{self.state.current_name} {self.state.now!r}", file=self.out)
            return True

        name, _, rest = line.partition(" ")
        try:
            if rest.strip():
                context = yaml.safe_load(rest)
                self.state.set_by_name(name, context)
            else:
                self.state.set_by_name(name)
        except yaml.YAMLError as e:
            log.error("Bad context for %s: %s", name, e)
        except StateError as e:
            log.error("%s", e)
        return True

    def run(self, lines) -> None:
        try:
            for line in lines:
                if not self.execute(line):
                    break
        finally:
            self.close()

    def close(self) -> None:
        self._stop_watching()


def main(argv: list[str] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    setup_logging()
    log.info("=== statekeeper ===")

    try:
        config = load_config(argv[0] if argv else None)
        setup_logging(config["logging"]["level"])
        state = build_state(config)
    except (StateError, yaml.YAMLError) as e:
        log.error("Could not build state: %s", e)
        return 1

    log.info("States: %s", ", ".join(state.names))
    StateConsole(state).run(sys.stdin)
    log.info("Final state: %s", state.current_name)
    return 0


if __name__ == "__main__":
    sys.exit(main())
