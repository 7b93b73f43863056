##########################################################################################
#
# Script name: config.py
#
# Description: Static configuration for providers, story grouping and the aggregate view.
#
##########################################################################################

from dataclasses import dataclass


# ****************************************************************************************
# Global data and configuration
# ****************************************************************************************


@dataclass(frozen=True)
class Provider:
    order: int
    slug: str
    label: str
    base_url: str
    api_key_env: str
    page_size: int = 50
    timeout: float = 15.0


PROVIDERS = [
    Provider(
        order=0,
        slug='guardian',
        label='Guardian',
        base_url='https://content.guardianapis.com',
        api_key_env='GUARDIAN_API_KEY',
    ),
    Provider(
        order=1,
        slug='gdelt',
        label='GDELT',
        base_url='https://api.gdeltproject.org/api/v2/doc/doc',
        api_key_env='GDELT_API_KEY',
        timeout=20.0,
    ),
    Provider(
        order=2,
        slug='currents',
        label='Currents',
        base_url='https://api.currentsapi.services/v1',
        api_key_env='CURRENTS_API_KEY',
    ),
]

PROVIDER_BY_SLUG = {provider.slug: provider for provider in PROVIDERS}

SOURCE_TAGS = {
    'guardian': 'guardian',
    'the guardian': 'guardian',
    'gdelt': 'gdelt',
    'currents': 'currents',
}

NO_DESCRIPTION = 'No description available.'

# Story grouping

DEFAULT_SIMILARITY_THRESHOLD = 0.20
MERGE_THRESHOLD_FACTOR = 0.85
CROSS_SOURCE_BOOST = 1.5

TEXT_TERM_LIMIT = 40
TITLE_TERM_LIMIT = 20
MIN_TERM_LENGTH = 3
TITLE_DOMINANCE_FLOOR = 0.15
TITLE_WEIGHT = 0.98

SHARED_TITLE_WORDS_BOOST = ((2, 0.20), (4, 0.30))
MERGE_SHARED_TITLE_WORDS = 3
MERGE_TITLE_BOOST = 0.3

RECENCY_BONUS = ((7, 0.15), (14, 0.05))
SAME_DOMAIN_BONUS = 0.05
TEXT_WEIGHT = 0.95
TIME_WEIGHT = 0.05

STOP_WORDS = frozenset(
    {
        'the',
        'and',
        'or',
        'but',
        'in',
        'on',
        'at',
        'to',
        'for',
        'of',
        'with',
        'by',
        'from',
        'as',
        'is',
        'was',
        'are',
        'were',
        'been',
        'be',
        'have',
        'has',
        'had',
        'do',
        'does',
        'did',
        'will',
        'would',
        'could',
        'should',
        'may',
        'might',
        'must',
        'can',
        'this',
        'that',
        'these',
        'those',
        'a',
        'an',
        'its',
        'it',
        'they',
        'them',
        'their',
        'there',
        'then',
        'than',
        'said',
        'says',
        'new',
        'news',
    }
)

# Aggregate view

MAX_GROUPS_PER_PAGE = 18
MAX_ARTICLES_PER_SOURCE = 30
MIN_ARTICLES_PER_SOURCE = 10
SOURCE_DOMINANCE_RATIO = 0.70
MAX_CONCURRENT_SUMMARIES = 3
CACHE_TTL_SECONDS = 60.0

TITLE_PREFIX_PATTERN = r'^(breaking|exclusive|update|live):\s*'
TITLE_OUTLET_SUFFIX_PATTERN = r'\s*-\s*(the guardian|guardian|gdelt|currents|reuters|ap|bbc).*$'

GENERIC_TITLE_PATTERNS = [
    'news story',
    'story 1',
    'story 2',
    'story 3',
    'latest news',
    'news coverage',
    'breaking news',
    'story from',
    'covered this story',
    'multiple sources',
]

SUMMARY_LEAD_INS = (
    'This story',
    'The story',
    'This article',
    'The article',
    'According to',
    'Reports indicate',
    'Sources say',
    'Multiple sources',
)

# Provider category maps

GUARDIAN_SECTIONS = {
    'sports': 'sport',
    'business': 'business',
    'technology': 'technology',
    'politics': 'politics',
    'health': 'health',
    'science': 'science',
    'entertainment': 'culture',
    'world': 'world',
    'us': 'us-news',
}

CURRENTS_CATEGORIES = {
    'sports': 'sports',
    'business': 'business',
    'technology': 'technology',
    'politics': 'politics',
    'health': 'health',
    'science': 'science',
    'entertainment': 'entertainment',
    'general': 'general',
}

# Countries

COUNTRY_NAMES = {
    'US': 'United States',
    'GB': 'United Kingdom',
    'CA': 'Canada',
    'AU': 'Australia',
    'DE': 'Germany',
    'FR': 'France',
    'IT': 'Italy',
    'ES': 'Spain',
    'NL': 'Netherlands',
    'BE': 'Belgium',
    'CH': 'Switzerland',
    'AT': 'Austria',
    'SE': 'Sweden',
    'NO': 'Norway',
    'DK': 'Denmark',
    'FI': 'Finland',
    'IE': 'Ireland',
    'PT': 'Portugal',
    'GR': 'Greece',
    'PL': 'Poland',
    'JP': 'Japan',
    'CN': 'China',
    'IN': 'India',
    'KR': 'South Korea',
    'SG': 'Singapore',
    'NZ': 'New Zealand',
    'ZA': 'South Africa',
    'NG': 'Nigeria',
    'BR': 'Brazil',
    'MX': 'Mexico',
    'AR': 'Argentina',
    'AE': 'United Arab Emirates',
    'IL': 'Israel',
    'TR': 'Turkey',
    'RU': 'Russia',
    'UA': 'Ukraine',
}

COUNTRY_VARIATIONS = {
    'US': ['United States', 'USA', 'US', 'America', 'American'],
    'GB': ['United Kingdom', 'UK', 'Britain', 'British', 'England', 'English'],
    'CA': ['Canada', 'Canadian'],
    'AU': ['Australia', 'Australian'],
    'DE': ['Germany', 'German'],
    'FR': ['France', 'French'],
    'IT': ['Italy', 'Italian'],
    'ES': ['Spain', 'Spanish'],
    'JP': ['Japan', 'Japanese'],
    'CN': ['China', 'Chinese'],
    'IN': ['India', 'Indian'],
    'BR': ['Brazil', 'Brazilian'],
    'MX': ['Mexico', 'Mexican'],
    'RU': ['Russia', 'Russian'],
    'KR': ['South Korea', 'Korean'],
}

STRICT_COUNTRY_CATEGORIES = {'sports', 'politics', 'business'}

COUNTRY_INDICATORS = {
    'US': {
        'sports': {
            'positive': [
                'united states', 'usa', 'us ', 'american', 'nfl', 'nba', 'mlb', 'nhl', 'mls',
                'ncaa', 'super bowl', 'world series', 'stanley cup', 'march madness',
            ],
            'negative': [
                'premier league', 'england', 'british', 'efl', 'fa cup', 'scotland',
                'manchester', 'liverpool', 'chelsea', 'arsenal', 'tottenham',
            ],
        },
        'politics': {
            'positive': [
                'united states', 'usa', 'us ', 'american', 'congress', 'senate', 'white house',
                'supreme court', 'capitol hill', 'senator', 'democrat', 'republican', 'federal',
            ],
            'negative': [
                'westminster', 'downing street', 'house of commons', 'house of lords', 'tory',
                'labour party', 'scottish parliament',
            ],
        },
        'business': {
            'positive': [
                'united states', 'usa', 'us ', 'american', 'nyse', 'nasdaq', 'dow jones',
                's&p 500', 'federal reserve', 'wall street', 'us economy',
            ],
            'negative': ['ftse', 'london stock exchange', 'uk economy', 'pound sterling', 'bank of england'],
        },
        'positive': ['united states', 'usa', 'us ', 'american', 'america'],
        'negative': ['premier league', 'england', 'british', 'britain', 'westminster', 'ftse'],
    },
    'GB': {
        'sports': {
            'positive': [
                'united kingdom', 'uk', 'britain', 'british', 'england', 'english', 'scotland',
                'wales', 'premier league', 'efl', 'fa cup', 'manchester', 'liverpool', 'chelsea',
                'arsenal', 'tottenham',
            ],
            'negative': ['nfl', 'nba', 'mlb', 'nhl', 'super bowl', 'world series', 'stanley cup'],
        },
        'politics': {
            'positive': [
                'united kingdom', 'uk', 'britain', 'british', 'westminster', 'downing street',
                'house of commons', 'house of lords', 'prime minister', 'tory', 'labour party',
            ],
            'negative': ['congress', 'senate', 'white house', 'supreme court', 'capitol hill', 'senator'],
        },
        'business': {
            'positive': [
                'united kingdom', 'uk', 'britain', 'british', 'ftse', 'london stock exchange',
                'uk economy', 'pound sterling', 'bank of england',
            ],
            'negative': ['nyse', 'nasdaq', 'dow jones', 's&p 500', 'federal reserve', 'wall street'],
        },
        'positive': ['united kingdom', 'uk', 'britain', 'british', 'england', 'english'],
        'negative': ['nfl', 'nba', 'mlb', 'nhl', 'congress', 'white house', 'nyse', 'nasdaq'],
    },
    'CA': {
        'sports': {
            'positive': ['canada', 'canadian', 'cfl', 'maple leafs', 'blue jays', 'raptors', 'canucks', 'oilers'],
            'negative': ['premier league', 'nfl', 'nba', 'mlb'],
        },
        'positive': ['canada', 'canadian'],
        'negative': ['premier league', 'nfl', 'nba', 'mlb'],
    },
    'AU': {
        'sports': {
            'positive': ['australia', 'australian', 'afl', 'nrl', 'a-league'],
            'negative': ['premier league', 'nfl', 'nba'],
        },
        'positive': ['australia', 'australian'],
        'negative': ['premier league', 'nfl', 'nba'],
    },
}
