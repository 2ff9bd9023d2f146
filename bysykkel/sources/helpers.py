from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Dict, List, Sequence

import pandas as pd
import requests
import requests_cache
from retry_requests import retry
from tqdm import tqdm

from bysykkel.core.exceptions import (
    DataNotFoundError,
    FetchError,
    FetchFailedError,
    PipelineError,
    SchemaMismatchError,
    TransientNetworkError,
)
from bysykkel.models import Slice
from bysykkel.sources.constants import (
    BACKOFF_FACTOR,
    CACHE_EXPIRE_AFTER,
    CACHE_NAME,
    HEADERS,
    RETRIES,
    STATUS_TO_RETRY,
    TIMEOUT,
    WORKERS,
)


# --- http ---------------------------------------------------------------------
def make_session(
    cache_name: str = CACHE_NAME,
    expire_after: int = CACHE_EXPIRE_AFTER,
    retries: int = RETRIES,
) -> requests.Session:
    """Cached session with urllib3 retries; ``expire_after=0`` disables the cache."""
    if expire_after == 0:
        base = requests.Session()
    else:
        base = requests_cache.CachedSession(cache_name, expire_after=expire_after)
    base.headers.update(HEADERS)
    return retry(
        base,
        retries=retries,
        backoff_factor=BACKOFF_FACTOR,
        status_to_retry=STATUS_TO_RETRY,
    )


def url_exists(url: str, session: requests.Session, timeout: float = TIMEOUT) -> bool:
    try:
        r = session.head(url, timeout=timeout, allow_redirects=True)
    except requests.RequestException as exc:
        raise TransientNetworkError(url, str(exc)) from exc

    if r.status_code >= 500:
        raise TransientNetworkError(url, f"HTTP {r.status_code}")
    return r.status_code < 400


def download_bytes(url: str, session: requests.Session, timeout: float = TIMEOUT) -> bytes:
    try:
        r = session.get(url, timeout=timeout)
    except requests.RequestException as exc:
        raise TransientNetworkError(url, str(exc)) from exc

    # the file may vanish between the HEAD probe and the GET
    if r.status_code in (404, 410):
        raise DataNotFoundError(url)
    if r.status_code >= 500:
        raise TransientNetworkError(url, f"HTTP {r.status_code}")
    if r.status_code >= 400:
        raise FetchError(url, f"HTTP {r.status_code}")
    return r.content


# --- slice runner -------------------------------------------------------------
def run_slices(
    slices: Sequence[Slice],
    fetch_one: Callable[[Slice], pd.DataFrame | None],
    workers: int = WORKERS,
    desc: str = "download",
) -> List[pd.DataFrame]:
    """
    Run *fetch_one* for every slice on a bounded thread pool.

    Frames come back in slice order, empty results are left out. A failing
    slice never stops its siblings; the failures are raised together once
    every slice has been attempted.
    """
    results: Dict[int, pd.DataFrame] = {}
    failures: Dict[str, PipelineError] = {}

    with ThreadPoolExecutor(max_workers=max(1, workers)) as pool:
        futures = {pool.submit(fetch_one, sl): i for i, sl in enumerate(slices)}
        for fut in tqdm(as_completed(futures), total=len(futures), desc=desc, unit="file"):
            i = futures[fut]
            try:
                frame = fut.result()
            except PipelineError as exc:
                logging.warning("%s", exc.message)
                failures[slices[i].url] = exc
                continue
            if frame is not None and not frame.empty:
                results[i] = frame

    if failures:
        for sl in slices:
            if isinstance(failures.get(sl.url), SchemaMismatchError):
                raise failures[sl.url]
        raise FetchFailedError(failures)

    return [results[i] for i in sorted(results)]
