##########################################################################################
#
# Script name: main.py
#
# Description: CLI entrypoint for aggregating news stories across providers.
#
##########################################################################################

import argparse
import json
import logging
import os
import sys
from datetime import date

from .aggregate import aggregate_news
from .cache import TTLCache
from .config import DEFAULT_SIMILARITY_THRESHOLD
from .errors import AggregatorError
from .fetchers import DEFAULT_PROVIDERS_FILE, NewsQuery, ProviderSettings, build_sample_articles, load_provider_config
from .models import AggregateResult, NormalizedArticle
from .render import write_site


# ****************************************************************************************
# Global data and configuration
# ****************************************************************************************

log = logging.getLogger(os.path.basename(sys.argv[0]))
log.setLevel(logging.DEBUG)
log.propagate = False
formatter = logging.Formatter(
    '%(asctime)-15s [%(funcName)25s:%(lineno)-5s] %(levelname)-8s %(message)s'
)

# File handler for logging
fh = logging.FileHandler('story_aggregator.log', mode='w')
fh.setLevel(logging.DEBUG)
fh.setFormatter(formatter)
if not any(isinstance(handler, logging.FileHandler) for handler in log.handlers):
    log.addHandler(fh)

root_log = logging.getLogger()
root_log.setLevel(logging.DEBUG)
if not any(isinstance(handler, logging.FileHandler) for handler in root_log.handlers):
    root_log.addHandler(fh)


# ****************************************************************************************
# Functions
# ****************************************************************************************


def fetch_sample_articles(
    news_query: NewsQuery,
    providers: list[ProviderSettings],
) -> tuple[dict[str, list[NormalizedArticle]], list[str]]:
    log.debug('Using sample data for %s; skipping network requests.', news_query.search_text or 'latest')
    enabled = {settings.slug for settings in providers if settings.enabled}
    articles = build_sample_articles()
    return {slug: rows for slug, rows in articles.items() if slug in enabled}, []


def build_aggregate(
    query: str,
    category: str,
    country: str,
    page: int,
    providers_config: str,
    similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    use_sample_data: bool = False,
    cache: TTLCache | None = None,
) -> AggregateResult:
    providers = load_provider_config(providers_config)
    enabled = ', '.join(settings.label for settings in providers if settings.enabled) or 'none'
    log.debug('Enabled providers: %s', enabled)

    kwargs = {}
    if use_sample_data:
        kwargs['fetch'] = fetch_sample_articles
    return aggregate_news(
        query=query,
        category=category,
        country=country,
        page=page,
        providers=providers,
        cache=cache,
        similarity_threshold=similarity_threshold,
        **kwargs,
    )


# ****************************************************************************************
# Handle the arguments
# ****************************************************************************************


def handle_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='Aggregate news stories from Guardian, GDELT and Currents.')
    parser.add_argument('--query', default='', help='Free-text search query.')
    parser.add_argument('--category', default='', help='Category to browse when no query is given.')
    parser.add_argument('--country', default='', help='Two-letter country code, e.g. us or gb.')
    parser.add_argument('--page', type=int, default=1, help='Page of story groups to summarize.')
    parser.add_argument(
        '--threshold',
        type=float,
        default=DEFAULT_SIMILARITY_THRESHOLD,
        help='Similarity threshold for grouping articles into stories.',
    )
    parser.add_argument(
        '--providers-config',
        default=DEFAULT_PROVIDERS_FILE,
        help='Path to provider settings YAML.',
    )
    parser.add_argument('--output-dir', default='site', help='Directory where the static page is written.')
    parser.add_argument('--json', action='store_true', help='Print the aggregate result as JSON to stdout.')
    parser.add_argument(
        '--sample',
        action='store_true',
        help='Use local sample data and skip all network requests.',
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose output to stdout.')
    parser.add_argument('-q', '--quiet', action='store_true', help='Minimal stdout.')
    args = parser.parse_args()

    if not args.sample and not args.query.strip() and not args.category.strip():
        parser.error('one of --query or --category is required (or use --sample)')
    if args.page < 1:
        parser.error('--page must be 1 or greater')

    # Configure stdout logging based on arguments
    ch = logging.StreamHandler(sys.stderr if args.json else sys.stdout)
    if args.verbose:
        ch.setLevel(logging.DEBUG)
    elif args.quiet:
        ch.setLevel(logging.ERROR)
    else:
        ch.setLevel(logging.INFO)
    ch.setFormatter(formatter)
    log.addHandler(ch)
    root_log.addHandler(ch)

    log.debug('Checking script requirements...')
    if not args.verbose and not args.quiet:
        log.debug('No output level specified. Defaulting to INFO.')

    log.info('++++++++++++++++++++++++++++++++++++++++++++++')
    log.info('+  %s', os.path.basename(sys.argv[0]))
    log.info('+  Python Version: %s', sys.version.split()[0])
    log.info('+  Today is: %s', date.today())
    log.info('++++++++++++++++++++++++++++++++++++++++++++++')
    return args


# ****************************************************************************************
# Main
# ****************************************************************************************


def main() -> None:
    args = handle_args()
    try:
        result = build_aggregate(
            query=args.query,
            category=args.category,
            country=args.country,
            page=args.page,
            providers_config=args.providers_config,
            similarity_threshold=args.threshold,
            use_sample_data=args.sample,
            cache=TTLCache(),
        )
    except AggregatorError as exc:
        log.error('Aggregation failed: %s', exc)
        sys.exit(1)

    for warning in result.warnings:
        log.warning(warning)
    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
        return
    index_path = write_site(result, output_dir=args.output_dir)
    log.info('Wrote %d story group(s) to %s', len(result.grouped_articles), index_path)


if __name__ == '__main__':
    main()
