# fleetscore/data/stores/db_scope.py
from __future__ import annotations

import logging
import random
import time
from contextlib import contextmanager
from typing import Callable, TypeVar

from sqlalchemy.exc import OperationalError

log = logging.getLogger(__name__)

T = TypeVar("T")


@contextmanager
def session_scope(session_maker):
    s = session_maker()
    try:
        yield s
        s.commit()
    except Exception as e:
        log.error(f"Session error: {e}")
        s.rollback()
        raise
    finally:
        s.close()


def retry(fn: Callable[[], T], *, tries: int = 2, base_delay_s: float = 0.15) -> T:
    """
    Retry only transient backend errors (locked database, dropped connection).
    Integrity and programming errors surface on the first attempt.
    """
    for attempt in range(tries):
        try:
            return fn()
        except OperationalError as e:
            if attempt == tries - 1:
                raise
            log.warning("Transient DB error (attempt %d/%d): %s", attempt + 1, tries, e)
            time.sleep(base_delay_s * (2**attempt) + random.random() * 0.05)
    raise RuntimeError("retry() called with tries < 1")
