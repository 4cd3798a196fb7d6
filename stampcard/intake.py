"""Turn a visit to ``?point=<id>`` into a recorded stamp."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Protocol
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from stampcard.applog import log_info
from stampcard.store import ProgressStore

POINT_PARAM = "point"


class Fetcher(Protocol):
    def fetch(self, stamp_index: int, total: int) -> Dict[str, str]: ...


@dataclass(frozen=True)
class IntakeResult:
    """Outcome of one intake pass; ``added_id`` is None when nothing was recorded."""

    added_id: Optional[int] = None
    clean_url: Optional[str] = None

    @property
    def added(self) -> bool:
        return self.added_id is not None


def parse_point(raw: Optional[str], total: int) -> Optional[int]:
    """Return the stamp id in ``raw`` when it is a base-10 integer within 1..total."""
    if raw is None:
        return None
    text = raw.strip()
    if not (text.isascii() and text.isdigit()):
        return None
    # leading zeros are allowed, so bound the length loosely before converting
    if len(text) > len(str(total)) + 8:
        return None
    try:
        value = int(text)
    except ValueError:
        return None
    if 1 <= value <= total:
        return value
    return None


def strip_point_param(url: str) -> str:
    """Drop every ``point`` query parameter, keeping the rest of the URL intact."""
    parts = urlsplit(url)
    query = [(key, value) for key, value in parse_qsl(parts.query, keep_blank_values=True) if key != POINT_PARAM]
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))


def build_share_url(base_url: str, point: int) -> str:
    """``<origin><path>?point=<id>`` for printing on a QR code at the collection point."""
    parts = urlsplit(base_url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode({POINT_PARAM: point}), ""))


def handle_intake(
    store: ProgressStore,
    url: str,
    args: Mapping[str, str],
) -> IntakeResult:
    """Record the stamp named by ``args['point']`` at most once.

    The membership check inside the store is the duplicate guard; the cleaned URL
    only keeps a refresh from showing the same intake again. No network call
    happens here: the page asks for the motivation message in its own request,
    so the response carrying the updated progress cookie goes out immediately.
    """
    stamp_id = parse_point(args.get(POINT_PARAM), store.total)
    if stamp_id is None or store.progress.has(stamp_id):
        return IntakeResult()

    record = store.record_stamp(stamp_id)
    if record is None:
        return IntakeResult()

    log_info("Stamp %s (%s) recorded", record.id, record.name)
    return IntakeResult(added_id=stamp_id, clean_url=strip_point_param(url))
