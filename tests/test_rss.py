import threading
import xml.etree.ElementTree as ET
from http.server import BaseHTTPRequestHandler, HTTPServer

import pytest

from gator.rss import RSSFeed, RSSItem, fetch_feed, parse_feed

SAMPLE = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Tom &amp;amp; Jerry</title>
    <link>http://example.com/</link>
    <description>Cats &amp;lt;3 mice</description>
    <item>
      <title>First &amp;amp; one</title>
      <link>http://example.com/1</link>
      <description>one</description>
      <pubDate>Mon, 01 Jan 2024 00:00:00 +0000</pubDate>
    </item>
    <item>
      <title>Second</title>
      <link>http://example.com/2</link>
    </item>
  </channel>
</rss>
"""


def test_parse_channel_fields_unescaped():
    feed = parse_feed(SAMPLE)
    assert feed.title == "Tom & Jerry"
    assert feed.description == "Cats <3 mice"
    assert feed.link == "http://example.com/"


def test_parse_items_in_order_not_unescaped():
    feed = parse_feed(SAMPLE)
    assert [item.link for item in feed.items] == [
        "http://example.com/1",
        "http://example.com/2",
    ]
    assert feed.items[0].title == "First &amp; one"
    assert feed.items[0].pub_date == "Mon, 01 Jan 2024 00:00:00 +0000"
    assert feed.items[1] == RSSItem(title="Second", link="http://example.com/2")


def test_parse_without_channel_gives_empty_feed():
    assert parse_feed(b"<rss></rss>") == RSSFeed()


def test_namespaced_link_matches_by_local_name():
    doc = (
        '<rss xmlns:atom="http://www.w3.org/2005/Atom"><channel>'
        "<link>http://example.com/</link>"
        '<atom:link href="http://example.com/feed" rel="self"/>'
        "</channel></rss>"
    )
    assert parse_feed(doc).link == ""


def test_parse_invalid_xml_raises():
    with pytest.raises(ET.ParseError):
        parse_feed(b"<rss><channel>")


def test_parse_empty_raises():
    with pytest.raises(ET.ParseError):
        parse_feed(b"")


@pytest.fixture
def server():
    seen = {}

    class Handler(BaseHTTPRequestHandler):
        def do_GET(self):
            seen["user_agent"] = self.headers.get("User-Agent")
            status = 404 if self.path == "/missing" else 200
            self.send_response(status)
            self.send_header("Content-Type", "application/rss+xml")
            self.send_header("Content-Length", str(len(SAMPLE)))
            self.end_headers()
            self.wfile.write(SAMPLE)

        def log_message(self, format, *args):
            pass

    httpd = HTTPServer(("127.0.0.1", 0), Handler)
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{httpd.server_address[1]}", seen
    httpd.shutdown()
    httpd.server_close()
    thread.join()


def test_fetch_feed_sends_user_agent(server):
    base, seen = server
    feed = fetch_feed(base + "/feed")
    assert feed == parse_feed(SAMPLE)
    assert seen["user_agent"] == "gator"


def test_fetch_feed_parses_error_responses(server):
    base, _ = server
    feed = fetch_feed(base + "/missing")
    assert len(feed.items) == 2