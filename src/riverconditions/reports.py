"""
Fly-shop fishing report scraper.

Finds the newest post on the shop's report listing, then reduces the post
body to a short summary plus sentences describing current fly activity.
"""

import logging
import re
from dataclasses import dataclass, field
from html.parser import HTMLParser
from typing import Any, Dict, List, Optional
from urllib.parse import urljoin

import httpx

from .config import ReportConfig
from .sync import add_sync_version

logger = logging.getLogger(__name__)

NO_REPORT_MESSAGE = "No recent report found."
FETCH_FAILED_MESSAGE = "Failed to fetch report."

MAX_SUMMARY_SENTENCES = 5
MAX_HIGHLIGHTS = 10

_SENTENCE_SPLIT = re.compile(r"\n|\. ")
_TIME_INDICATORS = re.compile(
    r"\b(currently|right now|this week|today|has been|we saw|were|are|is)\b",
    re.IGNORECASE,
)
_FLY_ACTIVITY = re.compile(
    r"\b(caddis|mayfly|blue wing|stonefly|nymph|streamer|dry fly|emerging|"
    r"hatching|rising|feeding|working|productive)\b",
    re.IGNORECASE,
)

# Elements that never have a closing tag
_VOID_TAGS = {
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "param", "source", "track", "wbr",
}


def _has_class(attrs: List[tuple], name: str) -> bool:
    for attr, value in attrs:
        if attr == "class" and value and name in value.split():
            return True
    return False


class FirstEntryLinkParser(HTMLParser):
    """Finds the href of the first link inside a `.entry-title` element."""

    def __init__(self) -> None:
        super().__init__()
        self.href: Optional[str] = None
        self._depth = 0

    def handle_starttag(self, tag, attrs):
        if self.href is not None or tag in _VOID_TAGS:
            return
        if self._depth:
            self._depth += 1
            if tag == "a":
                self.href = dict(attrs).get("href") or None
        elif _has_class(attrs, "entry-title"):
            self._depth = 1

    def handle_endtag(self, tag):
        if self._depth and tag not in _VOID_TAGS:
            self._depth -= 1


class EntryContentParser(HTMLParser):
    """Collects the text of the first `.entry-content` element."""

    skip_tags = {"script", "style", "noscript"}

    def __init__(self) -> None:
        super().__init__()
        self.fed: List[str] = []
        self._depth = 0
        self._done = False
        self._skip = 0

    def handle_starttag(self, tag, attrs):
        if self._done or tag in _VOID_TAGS:
            return
        if self._depth:
            self._depth += 1
            if tag in self.skip_tags:
                self._skip += 1
        elif _has_class(attrs, "entry-content"):
            self._depth = 1

    def handle_endtag(self, tag):
        if not self._depth or tag in _VOID_TAGS:
            return
        if tag in self.skip_tags and self._skip:
            self._skip -= 1
        self._depth -= 1
        if not self._depth:
            self._done = True

    def handle_data(self, data):
        if self._depth and not self._skip:
            self.fed.append(data)

    def get_data(self) -> str:
        return "".join(self.fed)


@dataclass
class FlyShopReport:
    """Latest fly-shop report, or a sentinel carrying ``message``."""

    source: str
    url: Optional[str] = None
    summary: str = ""
    highlights: List[str] = field(default_factory=list)
    message: Optional[str] = None

    @classmethod
    def not_found(cls, source: str, message: str = NO_REPORT_MESSAGE) -> "FlyShopReport":
        return cls(source=source, message=message)

    @property
    def found(self) -> bool:
        return self.url is not None

    def to_dict(self) -> Dict[str, Any]:
        if not self.found:
            return {"source": self.source, "message": self.message}
        return {
            "source": self.source,
            "url": self.url,
            "summary": self.summary,
            "highlights": list(self.highlights),
        }


def _sentences(text: str) -> List[str]:
    return [part.strip() for part in _SENTENCE_SPLIT.split(text)]


def summarize_content(text: str) -> str:
    """Join the first few mid-length sentences into a short summary."""
    lines = [line for line in _sentences(text) if 50 < len(line) < 300]
    lines = lines[:MAX_SUMMARY_SENTENCES]
    return ". ".join(lines) + ("." if lines else "")


def extract_present_observations(text: str) -> List[str]:
    """Sentences that describe current fly activity on the water."""
    observations = [
        line
        for line in _sentences(text)
        if line and _TIME_INDICATORS.search(line) and _FLY_ACTIVITY.search(line)
    ]
    return observations[:MAX_HIGHLIGHTS]


def find_latest_post_url(listing_html: str, base_url: str) -> Optional[str]:
    parser = FirstEntryLinkParser()
    parser.feed(listing_html)
    parser.close()
    return urljoin(base_url, parser.href) if parser.href else None


def extract_post_text(post_html: str) -> str:
    parser = EntryContentParser()
    parser.feed(post_html)
    parser.close()
    return parser.get_data()


@add_sync_version
async def get_fly_shop_report(
    config: Optional[ReportConfig] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> FlyShopReport:
    """
    Scrape the newest fly-shop report.

    Returns a ``not_found`` report when the listing has no posts or either
    page cannot be fetched.
    """
    config = config or ReportConfig()
    client = http_client or httpx.AsyncClient(
        timeout=config.timeout, verify=config.verify_ssl, follow_redirects=True
    )

    try:
        listing = await client.get(config.listing_url)
        listing.raise_for_status()
        post_url = find_latest_post_url(listing.text, config.listing_url)
        if not post_url:
            logger.info(f"No report links found at {config.listing_url}")
            return FlyShopReport.not_found(config.source)

        post = await client.get(post_url)
        post.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning(f"Report scraping failed: {e}")
        return FlyShopReport.not_found(config.source, FETCH_FAILED_MESSAGE)
    finally:
        if http_client is None:
            await client.aclose()

    body = extract_post_text(post.text)
    return FlyShopReport(
        source=config.source,
        url=post_url,
        summary=summarize_content(body),
        highlights=extract_present_observations(body),
    )
