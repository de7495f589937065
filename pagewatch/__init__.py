"""Web page change watcher.

Fetches a list of pages, extracts the text fragments that contain a
per-page substring and reports fragments that were not present on the
previous run.

Key modules:
    models      -- Target, FetchOutcome, RunSummary dataclasses and cache_key()
    scraper     -- Scraper, the concurrent fetch-and-diff orchestrator
    base        -- BaseFetcher abstract class
    fetchers    -- RequestsFetcher, ImpersonatingFetcher implementations
    factory     -- FetcherFactory for creating fetchers by name
    extract     -- fragment extraction from HTML
    cache       -- KeyValueCache and SqliteCache for last seen fragments
    metrics     -- MetricsSink, background CSV writer for request events
    timer       -- ScopedTimer for timing a block of code
    senders     -- Sender interface, PrintSender, TelegramSender
    targets     -- YAML target list loading
    config      -- Settings from the environment
    logger      -- structlog setup
    cli         -- command line entry point
"""

__version__ = "0.1.0"
