# vnbackend

The core of a backend for a visual novel editor. It keeps the story data —
chapters, their nodes, characters, players, media files and admin requests —
in a SQL database, and provides the pieces an HTTP layer needs around it:
configuration from the environment, logging settings, request metrics,
JWT tokens for admins and validation of incoming JSON payloads.

## What is inside

- `vnbackend.config` — `Config` and `new_config()`: reads the listening port
  from the `PORT` environment variable, falling back to 8080 when it is unset
  or not a number.
- `vnbackend.logconfig` — `LoggerConfig`, `new_logger_config()` and
  `new_logger()`: logging settings taken from `LOG_FILE`, `LOG_MAX_SIZE_MB`,
  `LOG_MAX_BACKUPS`, `LOG_MAX_AGE_DAYS`, `LOG_COMPRESS`, `LOG_LEVEL` and
  `DEBUG_MODE`, with a rotating log file. The helpers `get_env`,
  `get_env_int` and `get_env_bool` read single variables with defaults.
- `vnbackend.metrics` — a labelled `Histogram` of request durations, a
  labelled `Counter` of requests, `StatusRecorder` for remembering the status
  a handler wrote, and `record_request()` to update both at once.
- `vnbackend.schema` — `schema_statements()` and `create_tables()` for the
  database tables, `start_schema_validation()`, and the `StorageError` and
  `RecordNotFoundError` exceptions raised by the storage functions.
- `vnbackend.storage` — one module per entity:
  `media` (`Media`), `requests` (`Request`), `character` (`Character`),
  `chapter` (`Chapter`), `node` (`Node`) and `player` (`Player`), each with
  functions to register, select, update and delete records.
- `vnbackend.auth` — `AuthConfig`, `AuthorisationRequest`,
  `generate_token()` and `decode_token()` for HS256 admin tokens.
- `vnbackend.payloads` — parsers for the JSON bodies the editor sends
  (`parse_update_chapter_request()`, `parse_update_character_request()` and
  others, raising `PayloadError` on bad input) and
  `prepare_character_for_response()` / `prepare_chapters_for_response()`,
  which turn stored records into the string-keyed shape the client expects.

## Example

```python
from vnbackend.config import new_config
from vnbackend.logconfig import new_logger_config

config = new_config()
print(config.port)          # 8080 unless PORT says otherwise

log_settings = new_logger_config()
print(log_settings.filename, log_settings.level)
```

Storage functions take a database connection as their first argument and
raise `StorageError` (or `RecordNotFoundError` when nothing matches) instead
of returning error values:

```python
from vnbackend.schema import RecordNotFoundError, create_tables
from vnbackend.storage.chapter import select_chapter_with_id

create_tables(db)
try:
    chapter = select_chapter_with_id(db, 1)
except RecordNotFoundError:
    chapter = None
```

## Requirements

Python 3.10 or later. The only third-party dependency is PyJWT.