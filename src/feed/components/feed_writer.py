"""
RSS rendering and file output for the flight of the day.

The feed holds a single item. Files are written to a temporary sibling and
then moved into place, so a failed run never leaves a truncated feed.
"""

import os
import tempfile
from datetime import datetime, time, timezone
from email.utils import format_datetime
from pathlib import Path
from xml.sax.saxutils import escape

from src.utils import logger
from src.utils.exceptions import FeedWriteError
from src.feed.config import settings, FeedSettings
from src.feed.components.models import FeedItem, FlightCandidate
from src.feed.components.patterns import MONTH_NAMES, WEEKDAY_NAMES


UNKNOWN_AIRLINE = "Unknown Airline"
UNKNOWN_AIRPORT = "Unknown"


def format_long_date(now: datetime) -> str:
    """e.g. "Monday, October 19, 2026" (English, locale independent)."""
    return f"{WEEKDAY_NAMES[now.weekday()]}, {MONTH_NAMES[now.month - 1]} {now.day}, {now.year}"


def publish_date(now: datetime, feed_settings: FeedSettings) -> str:
    """RFC-1123 publish date according to the configured policy."""
    now_utc = now.astimezone(timezone.utc)
    if feed_settings.pub_date_mode == "fixed":
        stamp = datetime.combine(now_utc.date(), time(feed_settings.pub_date_hour_utc), tzinfo=timezone.utc)
    else:
        stamp = now_utc.replace(microsecond=0)
    return format_datetime(stamp, usegmt=True)


def build_feed_item(
    flight: FlightCandidate,
    now: datetime,
    aircraft_model: str | None = None,
    feed_settings: FeedSettings | None = None,
) -> FeedItem:
    """
    Build the presentation record for the selected flight.

    Args:
        flight: Selected candidate
        now: Frozen run time
        aircraft_model: Optional manufacturer/model line
        feed_settings: Feed settings (defaults to global settings)
    """
    feed_settings = feed_settings or settings.feed

    code = flight.display_code
    airline = flight.airline.name or UNKNOWN_AIRLINE
    origin = flight.departure.airport or UNKNOWN_AIRPORT
    destination = flight.arrival.airport or UNKNOWN_AIRPORT
    link = f"{feed_settings.tracking_link_base}{code}"

    lines = [
        f"📅 {format_long_date(now)}",
        f"✈ Flight of the day: {code} ({airline})",
        f"🛫 From: {origin}",
        f"🛬 To: {destination}",
    ]
    if aircraft_model:
        lines.append(f"🛩 Aircraft model: {aircraft_model}")
    lines.append(f"🔗 Track live here: {link}")

    return FeedItem(
        flight=flight,
        callsign=code,
        title=f"Flight {code} of the day - {airline}",
        link=link,
        description_lines=tuple(lines),
        pub_date=publish_date(now, feed_settings),
        guid=f"{code}-{now.astimezone(timezone.utc).date().isoformat()}",
        aircraft_model=aircraft_model,
    )


def _cdata(text: str) -> str:
    return "<![CDATA[" + text.replace("]]>", "]]]]><![CDATA[>") + "]]>"


def render_rss(item: FeedItem, feed_settings: FeedSettings | None = None) -> str:
    """Render a single-item RSS 2.0 document."""
    feed_settings = feed_settings or settings.feed
    return (
        '<?xml version="1.0" encoding="UTF-8" ?>\n'
        '<rss version="2.0">\n'
        "  <channel>\n"
        f"    <title>{escape(feed_settings.channel_title)}</title>\n"
        f"    <link>{escape(feed_settings.channel_link)}</link>\n"
        f"    <description>{escape(feed_settings.channel_description)}</description>\n"
        "    <item>\n"
        f"      <title>{escape(item.title)}</title>\n"
        f"      <link>{escape(item.link)}</link>\n"
        f"      <description>{_cdata(item.description)}</description>\n"
        f"      <pubDate>{item.pub_date}</pubDate>\n"
        f'      <guid isPermaLink="false">{escape(item.guid)}</guid>\n'
        "    </item>\n"
        "  </channel>\n"
        "</rss>\n"
    )


class FeedWriter:
    """Writes the rendered feed to disk."""

    def __init__(self, output_path: str | Path | None = None, feed_settings: FeedSettings | None = None):
        """
        Initialize the writer.

        Args:
            output_path: Target file (defaults to settings)
            feed_settings: Feed settings used for channel metadata
        """
        self.feed_settings = feed_settings or settings.feed
        self.output_path = Path(output_path or self.feed_settings.output_path)

    def write(self, item: FeedItem) -> Path:
        """
        Render and atomically write the feed.

        Returns:
            Path of the written file

        Raises:
            FeedWriteError: If the file cannot be written
        """
        content = render_rss(item, self.feed_settings)
        target = self.output_path
        tmp_name = None

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            os.replace(tmp_name, target)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise FeedWriteError(f"Failed to write feed: {e}", path=str(target))

        logger.info(f"RSS feed written: {target}")
        return target


__all__ = [
    "UNKNOWN_AIRLINE",
    "UNKNOWN_AIRPORT",
    "format_long_date",
    "publish_date",
    "build_feed_item",
    "render_rss",
    "FeedWriter",
]
