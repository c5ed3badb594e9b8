#!/usr/bin/env python3
"""
SAC checker:
- Seeded mode: check a word and its near-matches from the word list
- Bulk mode: check a random sample of unchecked words
- JSON ledger with resume (nothing is checked twice across runs)
- Windowed concurrent lookups, webhook notifications, rotating log + JSONL events

Usage: checker.py [seed] [--config config.yaml]
"""

import argparse
import json
import logging
import os
import sys
from dataclasses import dataclass, field
from logging.handlers import RotatingFileHandler
from typing import Optional

import requests
import yaml

from ledger import Ledger
from lexicon import DEFAULT_WORD_LIST_URL, CheckerError, load_lexicon
from notifier import Notifier
from scheduler import Scheduler, build_candidates
from verifier import DEFAULT_LOOKUP_URL, DEFAULT_TIMEOUT, LookupClient, Verifier


# ------------------------------- Config -------------------------------

@dataclass
class CheckerConfig:
    amount: int = 1000
    concurrency: int = 10
    request_delay_ms: int = 100
    similar_words_limit: int = 10
    working_data_file: str = "working_sacs.json"
    unused_data_file: str = "unused_sacs.json"
    word_list_file: str = "words.txt"
    word_list_url: str = DEFAULT_WORD_LIST_URL
    lookup_url: str = DEFAULT_LOOKUP_URL
    lookup_timeout: float = DEFAULT_TIMEOUT
    webhook_url: str = ""
    network: dict = field(default_factory=dict)
    logging: dict = field(default_factory=dict)


def load_config(path: Optional[str] = None) -> CheckerConfig:
    cfg = {}
    if path:
        with open(path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    ck = cfg.get("checker", cfg)

    conf = CheckerConfig(
        amount=int(ck.get("amount", 1000)),
        concurrency=int(ck.get("concurrency", 10)),
        request_delay_ms=int(ck.get("request_delay_ms", 100)),
        similar_words_limit=int(ck.get("similar_words_limit", 10)),
        working_data_file=str(ck.get("working_data_file", "working_sacs.json")),
        unused_data_file=str(ck.get("unused_data_file", "unused_sacs.json")),
        word_list_file=str(ck.get("word_list_file", "words.txt")),
        word_list_url=str(ck.get("word_list_url", DEFAULT_WORD_LIST_URL)),
        lookup_url=str(ck.get("lookup_url", DEFAULT_LOOKUP_URL)),
        lookup_timeout=float(ck.get("lookup_timeout", DEFAULT_TIMEOUT)),
        webhook_url=str(ck.get("webhook_url") or ""),
        network=dict(ck.get("network") or {"proxies": {"http": "", "https": "", "no_proxy": ""}}),
        logging=dict(ck.get("logging") or {}),
    )

    if conf.concurrency < 1:
        raise SystemExit("checker.concurrency must be at least 1.")
    if conf.amount < 1:
        raise SystemExit("checker.amount must be at least 1.")
    if conf.similar_words_limit < 0:
        raise SystemExit("checker.similar_words_limit must not be negative.")
    if conf.request_delay_ms < 0:
        raise SystemExit("checker.request_delay_ms must not be negative.")
    return conf


# ------------------------------- Network / logging helpers -------------------------------

def session_with_proxies(proxies: dict) -> requests.Session:
    s = requests.Session()
    s.trust_env = False
    # no_proxy stays in the session mapping; the process environment is left alone.
    px = {k: v for k, v in (proxies or {}).items() if k in ("http", "https", "no_proxy") and v}
    s.proxies.update(px)
    return s


def setup_logging(cfg_logging: dict):
    logger = logging.getLogger("checker")
    if logger.handlers:
        return logger
    level_name = (cfg_logging or {}).get("level", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logger.setLevel(level)

    log_file = (cfg_logging or {}).get("file", "logs/checker.log")
    if log_file:
        folder = os.path.dirname(log_file)
        if folder:
            os.makedirs(folder, exist_ok=True)
        handler = RotatingFileHandler(log_file, maxBytes=int((cfg_logging or {}).get("rotate_max_mb", 5))*1024*1024,
                                      backupCount=int((cfg_logging or {}).get("rotate_backups", 3)))
        handler.setFormatter(logging.Formatter(fmt="%(asctime)s [%(levelname)s] %(message)s", datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(handler)

    sh = logging.StreamHandler(sys.stdout)
    sh.setFormatter(logging.Formatter(fmt="%(asctime)s [%(levelname)s] %(message)s", datefmt="%H:%M:%S"))
    logger.addHandler(sh)
    return logger


def jsonl_emit(cfg_logging: dict, event: str, payload: dict):
    path = (cfg_logging or {}).get("jsonl_file")
    if not path:
        return
    folder = os.path.dirname(path)
    if folder:
        os.makedirs(folder, exist_ok=True)
    try:
        with open(path, "a", encoding="utf-8") as f:
            rec = {"event": event, **payload}
            f.write(json.dumps(rec, ensure_ascii=False) + "\n")
    except OSError:
        logging.getLogger("checker").debug("JSONL write failed | path=%s", path)


# ------------------------------- Run -------------------------------

def run(conf: CheckerConfig, seed: Optional[str] = None, session: Optional[requests.Session] = None,
        notifier: Optional[Notifier] = None) -> dict:
    """Check one seed (and its near-matches) or a random bulk sample. Returns final counts."""
    logger = logging.getLogger("checker")
    session = session or session_with_proxies((conf.network or {}).get("proxies", {}))
    notifier = notifier or Notifier(conf.webhook_url, session=session)

    lexicon = load_lexicon(conf.word_list_file, conf.word_list_url, session=session)
    ledger = Ledger.load(conf.working_data_file, conf.unused_data_file)

    candidates = build_candidates(seed, lexicon, ledger, amount=conf.amount,
                                  similar_limit=conf.similar_words_limit)
    if seed:
        message = f'Checking SAC "{seed}" and {max(0, len(candidates) - 1)} similar words'
    else:
        message = f"Starting SAC Checker for {conf.amount} random SACs"
    logger.info("Run start | mode=%s candidates=%d", "seeded" if seed else "bulk", len(candidates))
    jsonl_emit(conf.logging, "run_start", {"seed": seed, "candidates": len(candidates)})
    notifier.run_started(message)

    def on_window(offset: int, size: int):
        counts = ledger.snapshot()
        jsonl_emit(conf.logging, "window_done", {"offset": offset, "size": size, **counts})

    verifier = Verifier(ledger, LookupClient(conf.lookup_url, timeout=conf.lookup_timeout, session=session))
    scheduler = Scheduler(ledger, verifier, concurrency=conf.concurrency,
                          delay_ms=conf.request_delay_ms, on_window=on_window)
    try:
        stats = scheduler.run(candidates)
    except KeyboardInterrupt:
        ledger.flush()
        logger.info("Stop | interrupted by user (KeyboardInterrupt)")
        jsonl_emit(conf.logging, "stop", {"reason": "keyboardinterrupt", **ledger.snapshot()})
        raise

    counts = ledger.snapshot()
    logger.info("Run done | checked=%d windows=%d working=%d unused=%d",
                stats.total, stats.windows, counts["confirmed"], counts["absent"])
    jsonl_emit(conf.logging, "run_done", {"checked": stats.total, "windows": stats.windows, **counts})
    notifier.run_finished(stats.total, counts["confirmed"], counts["absent"])
    return {"checked": stats.total, **counts}


def main(argv=None):
    parser = argparse.ArgumentParser(description="SAC availability checker")
    parser.add_argument("seed", nargs="?", help="Check this word and its near-matches instead of a random sample")
    parser.add_argument("--config", help="Path to YAML config")
    args = parser.parse_args(argv)

    conf = load_config(args.config)
    logger = setup_logging(conf.logging)

    try:
        run(conf, seed=args.seed)
    except CheckerError as e:
        logger.error("Stop | %s", str(e))
        jsonl_emit(conf.logging, "stop", {"reason": "error", "error": str(e)})
        return 2
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
