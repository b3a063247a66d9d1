"""Fetching and parsing RSS documents."""

from __future__ import annotations

import html
import urllib.error
import urllib.request
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field

USER_AGENT = "gator"


@dataclass
class RSSItem:
    """One entry of a feed's channel."""

    title: str = ""
    link: str = ""
    description: str = ""
    pub_date: str = ""


@dataclass
class RSSFeed:
    """A feed's channel and its items."""

    title: str = ""
    link: str = ""
    description: str = ""
    items: list[RSSItem] = field(default_factory=list)


def _local_name(tag) -> str:
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def _chardata(element: ET.Element) -> str:
    """Text directly inside element, leaving out that of nested elements."""
    return (element.text or "") + "".join(child.tail or "" for child in element)


def _parse_item(element: ET.Element) -> RSSItem:
    item = RSSItem()
    for child in element:
        name = _local_name(child.tag)
        if name == "title":
            item.title = _chardata(child)
        elif name == "link":
            item.link = _chardata(child)
        elif name == "description":
            item.description = _chardata(child)
        elif name == "pubDate":
            item.pub_date = _chardata(child)
    return item


def parse_feed(data) -> RSSFeed:
    """Parse an RSS document; raises xml.etree.ElementTree.ParseError if malformed."""
    root = ET.fromstring(data)
    feed = RSSFeed()
    for channel in root:
        if _local_name(channel.tag) != "channel":
            continue
        for child in channel:
            name = _local_name(child.tag)
            if name == "title":
                feed.title = _chardata(child)
            elif name == "link":
                feed.link = _chardata(child)
            elif name == "description":
                feed.description = _chardata(child)
            elif name == "item":
                feed.items.append(_parse_item(child))
    feed.title = html.unescape(feed.title)
    feed.description = html.unescape(feed.description)
    return feed


def fetch_feed(feed_url) -> RSSFeed:
    """Download the document at feed_url and parse it, whatever the HTTP status."""
    request = urllib.request.Request(feed_url, headers={"User-Agent": USER_AGENT})
    try:
        with urllib.request.urlopen(request) as response:
            body = response.read()
    except urllib.error.HTTPError as exc:
        try:
            body = exc.read()
        finally:
            exc.close()
    return parse_feed(body)