"""In-memory keyword index over recipe text, kept fresh by one background worker.

Writers never block: a change notification is a non-blocking put on a bounded
queue and is dropped when the queue is full. The index may therefore lag
behind the store; searches that read the store directly are unaffected.
"""
import logging
import queue
import threading
from contextlib import contextmanager
from typing import Callable, Dict, Iterable, List, Optional, Set

from .config import INDEX_QUEUE_SIZE

logger = logging.getLogger(__name__)

PUNCTUATION = ".,!?"
MIN_KEYWORD_LEN = 2

_STOP = object()


class ReadWriteLock:
    """Many concurrent readers or a single writer."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False

    @contextmanager
    def read(self):
        with self._cond:
            while self._writer:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write(self):
        with self._cond:
            while self._writer or self._readers:
                self._cond.wait()
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


def tokenize_recipe(recipe) -> List[str]:
    """Keywords for one recipe, in first-seen order and without duplicates.

    Name and description are split on whitespace; ingredient names are kept
    whole.
    """
    seen = set()
    tokens = []
    text = f"{recipe.name} {recipe.description or ''}".lower()
    for word in text.split():
        word = word.strip(PUNCTUATION)
        if len(word) >= MIN_KEYWORD_LEN and word not in seen:
            seen.add(word)
            tokens.append(word)
    for ing in recipe.ingredients or []:
        name = ing.name.lower()
        if len(name) >= MIN_KEYWORD_LEN and name not in seen:
            seen.add(name)
            tokens.append(name)
    return tokens


class KeywordIndex:
    def __init__(self):
        self._index: Dict[str, List[int]] = {}
        self._lock = ReadWriteLock()

    def rebuild(self, recipes: Iterable) -> None:
        index: Dict[str, List[int]] = {}
        count = 0
        for recipe in recipes:
            count += 1
            for token in tokenize_recipe(recipe):
                index.setdefault(token, []).append(recipe.id)
        with self._lock.write():
            self._index = index
        logger.info("Keyword index rebuilt: %d recipe(s), %d keyword(s)", count, len(index))

    def _purge(self, recipe_id: int) -> None:
        for keyword in list(self._index):
            ids = [i for i in self._index[keyword] if i != recipe_id]
            if ids:
                self._index[keyword] = ids
            else:
                del self._index[keyword]

    def replace_recipe(self, recipe_id: int, tokens: Iterable[str]) -> None:
        """Swap every posting of `recipe_id` for `tokens` in one write."""
        with self._lock.write():
            self._purge(recipe_id)
            for token in tokens:
                postings = self._index.setdefault(token, [])
                if recipe_id not in postings:
                    postings.append(recipe_id)

    def remove_recipe(self, recipe_id: int) -> None:
        with self._lock.write():
            self._purge(recipe_id)

    def lookup(self, keyword: str) -> Set[int]:
        key = (keyword or "").strip().lower()
        with self._lock.read():
            return set(self._index.get(key, ()))

    def keywords(self) -> List[str]:
        with self._lock.read():
            return sorted(self._index)

    def __contains__(self, keyword) -> bool:
        with self._lock.read():
            return keyword in self._index

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._index)


class IndexUpdater:
    """Single consumer of recipe ids to reindex.

    Only one worker thread ever runs `reindex`, so index mutations are
    serialized.
    """

    def __init__(self, reindex: Callable[[int], None], maxsize: int = INDEX_QUEUE_SIZE):
        self._reindex = reindex
        self._queue: "queue.Queue" = queue.Queue(maxsize=maxsize)
        self._thread: Optional[threading.Thread] = None
        self._dropped_lock = threading.Lock()
        self._stopping = False
        self.dropped = 0

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            return
        self._stopping = False
        self._thread = threading.Thread(
            target=self._run, name="keyword-index-updater", daemon=True
        )
        self._thread.start()

    def notify(self, recipe_id: int) -> bool:
        """Queue `recipe_id` for reindexing. Never blocks.

        Returns False when the queue is full and the notification was dropped.
        """
        try:
            self._queue.put_nowait(recipe_id)
        except queue.Full:
            with self._dropped_lock:
                self.dropped += 1
            logger.warning("Index queue full, dropped reindex of recipe %s", recipe_id)
            return False
        return True

    def join(self) -> None:
        """Block until every queued id has been processed."""
        self._queue.join()

    def stop(self, timeout: Optional[float] = None) -> bool:
        """Ask the worker to finish and wait up to `timeout` for it.

        Returns False if the worker is still running afterwards; it stays
        registered so `start()` will not spawn a second consumer.
        """
        if not self.is_running:
            return True
        if not self._stopping:
            # one sentinel per worker
            try:
                self._queue.put(_STOP, timeout=timeout)
            except queue.Full:
                logger.warning("Index queue still full after %ss, updater not stopped", timeout)
                return False
            self._stopping = True
        self._thread.join(timeout)
        if self._thread.is_alive():
            logger.warning("Index updater did not stop within %ss", timeout)
            return False
        self._thread = None
        return True

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                self._reindex(item)
            except Exception:
                logger.exception("Reindex of recipe %s failed", item)
            finally:
                self._queue.task_done()
