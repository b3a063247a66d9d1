# gator

`gator` is a small command-line RSS aggregator. Several users share one
SQLite database: each user registers, adds feeds, follows feeds added by
others, and runs an aggregation loop that fetches the followed feeds in turn
and prints the titles of their items.

It needs nothing beyond the Python standard library (Python 3.10 or later).

## Installation

```
pip install .
```

This installs the `gator` command. `python -m gator.cli` does the same job.

## Configuration

`gator` reads its settings from `.gatorconfig.json` in your home directory.
The file is not created for you; write it before the first run:

```json
{"db_url": "gator.db", "current_user_name": ""}
```

- `db_url` names the SQLite database: a file path, `:memory:`, or a
  `sqlite:///path` URL (`sqlite://` alone means an in-memory database).
  Any other URL scheme is rejected. The tables are created on first use.
- `current_user_name` is the logged-in user. `gator` rewrites the whole file
  itself when you `login`, `register` or `reset`.

If the file is missing or is not a JSON object with string fields, `gator`
prints `ERROR: Unable to load config` and the reason, and exits with status 1.
If the database cannot be opened it prints `ERROR: Unable to connect to db`.

## Commands

```
gator <command> [args...]
```

Running `gator` with no command prints the list of available commands and
exits with status 1. An unknown command, a wrong number of arguments or any
other error is printed and gives exit status 1; success gives 0.

| Command | Arguments | What it does |
| --- | --- | --- |
| `help` | | List the available commands. |
| `register` | `<name>` | Create a user and log in as that user. |
| `login` | `<name>` | Switch to an existing user. |
| `users` | | List all users and mark the current one with `(current)`. |
| `reset` | | Delete all users, feeds and follows, and log out. |
| `agg` | `<duration>` | Keep fetching the current user's feeds, one every `<duration>`. |
| `addfeed` | `<name> <url>` | Add a feed and follow it as the current user. |
| `feeds` | | List every feed as `name : url`. |
| `follow` | `<url>` | Follow an existing feed as the current user. |
| `following` | | List the feeds the current user follows as `name - url`. |
| `unfollow` | `<url>` | Stop following a feed; prints the id of each feed unfollowed. |

`agg`, `addfeed`, `follow`, `following` and `unfollow` act for the current
user; if that user is not in the database the command fails with
`no rows in result set`. Feed URLs and user names are unique.

### Example session

```
gator register alice
gator addfeed "Example News" https://example.com/rss.xml
gator following
gator agg 30s
```

`agg` takes a positive duration made of numbers and units, such as `500ms`,
`30s`, `1.5m` or `1h30m`; the units are `ns`, `us` (or `µs`), `ms`, `s`,
`m` and `h`. It scrapes once straight away and then on every tick: it picks
the followed feed fetched least recently (never-fetched feeds first), marks
it as fetched, downloads it with the `User-Agent: gator` header and prints
the title of each item. Errors during a tick are printed and the loop goes
on; ticks missed while a fetch is slow are skipped. It runs until
interrupted, then exits with status 130.

## Using it as a library

- `gator.rss.parse_feed(data)` parses an RSS document into an `RSSFeed`
  (`title`, `link`, `description`, `items`) of `RSSItem`s (`title`, `link`,
  `description`, `pub_date`); the channel title and description have HTML
  entities unescaped. `gator.rss.fetch_feed(url)` downloads and parses one.
- `gator.database.connect(db_url)` returns a `Queries` object with methods
  such as `create_user`, `get_user`, `create_feed`, `get_feeds`,
  `create_feed_follow`, `get_next_feed_to_fetch` and `mark_feed_fetched`.
  Lookups that find nothing raise `gator.database.NotFoundError`;
  `Queries.transaction()` groups writes.
- `gator.command.Commands` maps names to handlers; `run` raises
  `UnknownCommandError` for a name that is not registered.

## What it does not do

- Storage is SQLite only; server databases are not supported.
- Feed items are printed, not stored: there is no command to browse past
  posts.
- Only RSS `channel`/`item` documents are read; Atom feeds yield no items.

## Running the tests

```
pip install ".[test]"
pytest
```