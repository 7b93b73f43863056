##########################################################################################
#
# Script name: test_similarity.py
#
# Description: Pairwise article similarity scoring tests.
#
##########################################################################################

from story_aggregator.models import NormalizedArticle
from story_aggregator.utils import parse_timestamp
from story_aggregator.similarity import (
    extract_key_terms,
    jaccard_similarity,
    normalize_text,
    shared_title_words,
    similarity,
)


def _article(title: str, description: str = '', url: str = 'https://example.com/a', published_at: str = '',
             source: str = 'guardian') -> NormalizedArticle:
    return NormalizedArticle(
        title=title,
        description=description,
        url=url,
        published_at=published_at,
        source_name=source.title(),
        source=source,
    )


def test_normalize_text_strips_punctuation_and_case() -> None:
    assert normalize_text('  Breaking: Markets   RALLY!! ') == 'breaking markets rally'
    assert normalize_text('') == ''


def test_extract_key_terms_drops_stop_words_and_short_words() -> None:
    terms = extract_key_terms('The council and the mayor met at city hall; the council voted.')
    assert terms[0] == 'council'
    assert 'the' not in terms
    assert 'at' not in terms
    assert extract_key_terms('   ') == []


def test_jaccard_similarity_edge_cases() -> None:
    assert jaccard_similarity(set(), set()) == 1.0
    assert jaccard_similarity({'a'}, set()) == 0.0
    assert jaccard_similarity({'a', 'b'}, {'b', 'c'}) == 1 / 3


def test_shared_title_words_ignores_short_words() -> None:
    shared = shared_title_words('EU to ban gas cars by 2035', 'EU votes to ban petrol and gas cars')
    assert shared == {'ban', 'gas', 'cars'}


def test_identical_articles_score_near_maximum() -> None:
    article = _article(
        'Central bank holds interest rates steady',
        'Policymakers kept rates unchanged amid inflation worries.',
        published_at='2026-03-01T10:00:00Z',
    )
    assert similarity(article, article) >= 0.95
    assert similarity(article, article) <= 1.0


def test_identical_text_without_dates_scores_at_least_point_nine() -> None:
    first = _article('Wildfire forces evacuations', 'Thousands leave coastal towns.', url='https://a.example/x')
    second = _article('Wildfire forces evacuations', 'Thousands leave coastal towns.', url='https://b.example/y',
                      source='currents')
    assert similarity(first, second) >= 0.9


def test_empty_text_scores_zero() -> None:
    empty = _article('', '')
    other = _article('Parliament passes housing bill', 'Lawmakers approved the bill.')
    assert similarity(empty, other) == 0.0
    assert similarity(other, empty) == 0.0


def test_similarity_is_symmetric() -> None:
    first = _article(
        'City Council Approves New Budget for Schools and Transit',
        'Council members voted 7-2 to approve the city budget.',
        url='https://www.theguardian.com/budget',
        published_at='2026-03-01T10:00:00Z',
    )
    second = _article(
        'Council approves city budget plan with school and transit funding',
        'The approved plan increases school funding and expands transit service.',
        url='https://www.example-wire.com/budget',
        published_at='2026-03-03T08:00:00Z',
        source='gdelt',
    )
    assert similarity(first, second) == similarity(second, first)


def test_more_shared_title_words_never_lowers_score() -> None:
    base = _article('Storm floods downtown streets overnight', 'Heavy rain caused flooding.')
    two_shared = _article('Storm floods harbour district', 'Residents reported damage.', source='gdelt')
    four_shared = _article('Storm floods downtown streets again', 'Residents reported damage.', source='gdelt')
    assert similarity(base, four_shared) >= similarity(base, two_shared)


def test_unrelated_articles_score_low() -> None:
    first = _article('Tech giant unveils quantum computing chip', 'Lower error rates in early experiments.')
    second = _article('Marathon organisers announce route changes', 'Runners follow a revised course.',
                      source='currents')
    assert similarity(first, second) < 0.2


def test_unparsable_date_and_url_do_not_raise() -> None:
    first = _article('Election results announced in capital', 'Officials counted ballots.', url='not a url',
                     published_at='yesterday-ish')
    second = _article('Election results announced in capital', 'Officials counted ballots.', url='',
                      published_at='20260301T101500Z', source='gdelt')
    score = similarity(first, second)
    assert 0.0 <= score <= 1.0
    assert score >= 0.9


def test_same_hostname_adds_small_bonus() -> None:
    first = _article('Budget vote delayed', 'Council postpones decision on spending plan.',
                     url='https://news.example.com/one')
    same_host = _article('Budget talks continue', 'Negotiators meet again over spending.',
                         url='https://news.example.com/two', source='gdelt')
    other_host = _article('Budget talks continue', 'Negotiators meet again over spending.',
                          url='https://other.example.org/two', source='gdelt')
    assert similarity(first, same_host) > similarity(first, other_host)


def test_out_of_range_offset_dates_give_no_time_bonus() -> None:
    early = _article('Election results announced in capital', 'Officials counted ballots.',
                     url='https://a.example.com/x', published_at='0001-01-01T00:00:00+05:00')
    late = _article('Election results announced in capital', 'Officials counted ballots.',
                    url='https://b.example.com/y', published_at='9999-12-31T23:00:00-05:00', source='gdelt')
    dated = _article('Election results announced in capital', 'Officials counted ballots.',
                     url='https://c.example.com/z', published_at='2026-03-01T10:00:00Z', source='currents')
    undated = _article('Election results announced in capital', 'Officials counted ballots.',
                       url='https://c.example.com/z', source='currents')

    assert parse_timestamp('0001-01-01T00:00:00+05:00') is None
    assert parse_timestamp('9999-12-31T23:00:00-05:00') is None
    assert similarity(early, dated) == similarity(early, undated)
    assert similarity(late, dated) == similarity(late, undated)
    assert similarity(early, late) >= 0.9


def test_normalize_text_treats_non_ascii_letters_as_separators() -> None:
    assert normalize_text('Café crème') == 'caf cr me'
