"""
Candidate list construction and windowed, concurrent verification.

Windows run one after another. Inside a window every check runs on its own
worker thread; the ledger is flushed once the whole window has finished and
before the next one is dispatched, so a crash loses at most one window.
"""

import logging
import random
import time
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Sequence

from ledger import Ledger
from lexicon import CheckerError, is_eligible
from similarity import similar_words
from verifier import Verifier

log = logging.getLogger("checker.scheduler")


class SamplingExhaustedError(CheckerError):
    pass


@dataclass
class RunStats:
    total: int = 0
    windows: int = 0
    flushes: int = 0


def windows(items: Sequence[str], size: int) -> Iterator[Sequence[str]]:
    for offset in range(0, len(items), size):
        yield items[offset:offset + size]


def sample_candidates(lexicon: Sequence[str], ledger: Ledger, amount: int,
                      rng: Optional[random.Random] = None) -> List[str]:
    """Draw `amount` distinct unchecked words uniformly at random from `lexicon`."""
    rng = rng or random.Random()
    remaining = {w for w in lexicon if is_eligible(w) and not ledger.has(w)}
    if len(remaining) < amount:
        raise SamplingExhaustedError(
            f"requested {amount} unchecked SACs but only {len(remaining)} remain "
            f"in a word list of {len(lexicon)}; lower `amount` or use a larger word list"
        )

    picked = {}
    while len(picked) < amount:
        word = lexicon[rng.randrange(len(lexicon))]
        if word in remaining and word not in picked:
            picked[word] = None
    return list(picked)


def build_candidates(seed: Optional[str], lexicon: Sequence[str], ledger: Ledger,
                     amount: int = 1000, similar_limit: int = 10,
                     rng: Optional[random.Random] = None) -> List[str]:
    if seed:
        return similar_words(seed, lexicon, ledger.seen, limit=similar_limit)
    return sample_candidates(lexicon, ledger, amount, rng=rng)


class Scheduler:
    def __init__(self, ledger: Ledger, verifier: Verifier, concurrency: int = 10, delay_ms: int = 100,
                 sleep: Callable[[float], None] = time.sleep, on_window: Optional[Callable[[int, int], None]] = None):
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.ledger = ledger
        self.verifier = verifier
        self.concurrency = concurrency
        self.delay = max(0, delay_ms) / 1000.0
        self.sleep = sleep
        self.on_window = on_window

    def run(self, candidates: Sequence[str]) -> RunStats:
        stats = RunStats(total=len(candidates))
        with ThreadPoolExecutor(max_workers=self.concurrency) as pool:
            for index, batch in enumerate(windows(candidates, self.concurrency)):
                offset = index * self.concurrency
                futures = [pool.submit(self.verifier.check, sac) for sac in batch]
                wait(futures)
                for fut in futures:
                    fut.result()
                stats.windows += 1
                log.info("Window done | offset=%d size=%d", offset, len(batch))

                more = offset + self.concurrency < len(candidates)
                if more:
                    self.ledger.flush()
                    stats.flushes += 1
                if self.on_window:
                    self.on_window(offset, len(batch))
                if more:
                    self.sleep(self.delay)

        # The last window is persisted here, as is an empty run.
        self.ledger.flush()
        stats.flushes += 1
        return stats
