"""
Word corpus loading for the SAC checker.

The corpus is a newline-delimited file. When it is missing it is downloaded
once from a public word list, filtered, and written back for later runs.
"""

import logging
import os
from typing import Iterable, List, Optional, Tuple

import requests

DEFAULT_WORD_LIST_URL = "https://raw.githubusercontent.com/dwyl/english-words/master/words_alpha.txt"

MIN_LENGTH = 3
MAX_LENGTH = 10

log = logging.getLogger("checker.lexicon")


class CheckerError(Exception):
    pass

class LexiconBootstrapError(CheckerError):
    pass


def is_eligible(word: str) -> bool:
    return MIN_LENGTH <= len(word) <= MAX_LENGTH and bool(word.strip())


def normalize(text: str) -> List[str]:
    words = (line.replace("\r", "") for line in text.split("\n"))
    return [w for w in words if is_eligible(w)]


def download_lexicon(url: str, session: Optional[requests.Session] = None, timeout: int = 30) -> List[str]:
    http = session or requests.Session()
    try:
        r = http.get(url, timeout=timeout)
        r.raise_for_status()
    except requests.RequestException as e:
        log.error("Word list download failed | url=%s error=%s", url, str(e))
        raise LexiconBootstrapError(f"could not download word list from {url}: {e}") from e
    words = normalize(r.text)
    log.info("Word list downloaded | words=%d", len(words))
    return words


def save_lexicon(path: str, words: Iterable[str]) -> None:
    folder = os.path.dirname(path)
    if folder:
        os.makedirs(folder, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write("\n".join(words))


def load_lexicon(path: str, source_url: str = DEFAULT_WORD_LIST_URL,
                 session: Optional[requests.Session] = None) -> Tuple[str, ...]:
    """Return the eligible words of `path`, bootstrapping the file if absent or unreadable."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            words = normalize(f.read())
        log.info("Word list loaded | path=%s words=%d", path, len(words))
    except (OSError, UnicodeDecodeError) as e:
        log.info("Word list missing or unreadable, downloading | path=%s error=%s", path, str(e))
        words = download_lexicon(source_url, session=session)
        save_lexicon(path, words)
    return tuple(words)
