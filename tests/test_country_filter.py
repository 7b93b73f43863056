##########################################################################################
#
# Script name: test_country_filter.py
#
# Description: Country relevance heuristics for text-matched provider results.
#
##########################################################################################

from story_aggregator.country_filter import article_matches_country, filter_articles_by_country
from story_aggregator.models import NormalizedArticle


def _article(title: str, description: str) -> NormalizedArticle:
    return NormalizedArticle(
        title=title,
        description=description,
        url=f'https://www.theguardian.com/{title.lower().replace(" ", "-")}',
        published_at='2026-03-01T10:00:00Z',
        source_name='Guardian',
        source='guardian',
    )


PREMIER_LEAGUE = _article('Arsenal beat Chelsea in Premier League clash', 'The home side won two goals to one.')
SUPER_BOWL = _article('NFL playoffs: Chiefs advance to Super Bowl', 'Kansas City won the conference final.')
TENNIS = _article('Tennis star wins title in straight sets', 'The final lasted under two hours.')


def test_negative_indicators_reject_strict_category() -> None:
    match = article_matches_country(PREMIER_LEAGUE, 'us', 'sports')
    assert match.matches is False
    assert match.confidence == 'high'


def test_positive_indicators_accept_strict_category() -> None:
    match = article_matches_country(SUPER_BOWL, 'US', 'sport')
    assert match.matches is True
    assert match.confidence == 'high'


def test_strict_category_without_indicators_is_rejected() -> None:
    match = article_matches_country(TENNIS, 'US', 'sports')
    assert match.matches is False


def test_non_strict_category_allows_global_content() -> None:
    match = article_matches_country(_article('Local bakery wins award', 'Judges praised the sourdough.'), 'GB')
    assert match.matches is True
    assert match.confidence == 'low'


def test_unknown_country_code_allows_everything() -> None:
    assert article_matches_country(TENNIS, 'ZZ').matches is True


def test_country_without_indicators_uses_name_variations() -> None:
    match = article_matches_country(_article('German parliament approves budget', 'Lawmakers voted late.'), 'DE')
    assert match.matches is True
    assert match.confidence == 'medium'


def test_filter_articles_by_country_keeps_relevant_articles() -> None:
    kept = filter_articles_by_country([PREMIER_LEAGUE, SUPER_BOWL, TENNIS], 'us', 'sports')
    assert kept == [SUPER_BOWL]


def test_filter_articles_by_country_without_country_returns_all() -> None:
    articles = [PREMIER_LEAGUE, TENNIS]
    assert filter_articles_by_country(articles, '') == articles
