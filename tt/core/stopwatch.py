from datetime import timedelta
from tt.common.logger import log
from tt.core.duration import format_clock
from tt.util import now_local, parse_iso

# The one stopwatch the app runs. Elapsed time advances by polling: the UI calls tick() once a second while
# running, so a suspended process simply loses those seconds. The anchor is the wall-clock instant the current
# count started from, recomputed as (now - elapsed) whenever elapsed is adjusted while running.
class Stopwatch:

    def __init__(self, elapsed=0, running=False, anchor=None, clock=now_local):
        self._clock = clock
        self.elapsed = max(0, int(elapsed))
        self.running = bool(running)
        self.anchor = anchor

    # Rebuilds a stopwatch from the dict written by snapshot().
    @classmethod
    def from_snapshot(cls, data, clock=now_local):
        data = data or {}
        anchor = data.get("anchor")
        return cls(
            elapsed=data.get("elapsed", 0),
            running=data.get("running", False),
            anchor=parse_iso(anchor) if anchor else None,
            clock=clock,
        )

    def snapshot(self):
        return {
            "elapsed": self.elapsed,
            "running": self.running,
            "anchor": self.anchor.isoformat() if self.anchor else None,
        }

    @property
    def display(self):
        return format_clock(self.elapsed)

    @property
    def is_idle(self):
        return not self.running and self.elapsed == 0 and self.anchor is None

    # Start and pause. Starting keeps an existing anchor so a paused count resumes from where it began.
    def start(self):
        if self.running:
            return
        if self.anchor is None:
            self.anchor = self._clock() - timedelta(seconds=self.elapsed)
        self.running = True
        log.debug(f"Started stopwatch at elapsed {self.elapsed}, anchor {self.anchor.isoformat()}")

    def pause(self):
        self.running = False
        log.debug(f"Paused stopwatch at elapsed {self.elapsed}")

    def tick(self):
        if self.running:
            self.elapsed += 1

    # Stops and hands back the elapsed seconds. Does not reset, the caller decides that.
    def finalize(self):
        self.running = False
        log.debug(f"Finalized stopwatch with elapsed {self.elapsed}")
        return self.elapsed

    def reset(self):
        self.running = False
        self.elapsed = 0
        self.anchor = None
        log.debug("Reset stopwatch to 0")

    # Adds manually entered time. Negative parts clamp to 0 and an all-zero add is ignored (returns False).
    def add_manual(self, hours=0, minutes=0, seconds=0):
        add = max(0, int(hours)) * 3600 + max(0, int(minutes)) * 60 + max(0, int(seconds))
        if add <= 0:
            return False
        self.elapsed += add
        if self.running:
            self.anchor = self._clock() - timedelta(seconds=self.elapsed)
        log.debug(f"Added {add} seconds manually, elapsed is now {self.elapsed}")
        return True

    # Stops, reports (elapsed, anchor) to `on_autosave` when there's anything to report, then resets no matter
    # what the callback did.
    def stop_and_autosave(self, on_autosave):
        self.running = False
        elapsed, anchor = self.elapsed, self.anchor
        try:
            if elapsed > 0 and anchor is not None:
                on_autosave(elapsed, anchor)
        finally:
            self.reset()
        return elapsed

    def __repr__(self):
        state = "running" if self.running else ("idle" if self.is_idle else "paused")
        return f"Stopwatch({self.display}, {state})"


def anchor_from(elapsed, now=None):
    """Wall-clock instant `elapsed` seconds before `now`."""
    now = now or now_local()
    return now - timedelta(seconds=max(0, int(elapsed)))
