##########################################################################################
#
# Script name: test_grouping.py
#
# Description: Story clustering, merging, dedupe and ordering tests.
#
##########################################################################################

from story_aggregator.grouping import (
    cluster_articles,
    dedupe_group,
    group_similar_articles,
    merge_groups,
    order_groups,
)
from story_aggregator.models import ArticleGroup, NormalizedArticle


def _article(source: str, title: str, description: str, url: str, published_at: str = '') -> NormalizedArticle:
    return NormalizedArticle(
        title=title,
        description=description,
        url=url,
        published_at=published_at,
        source_name=source.title(),
        source=source,
    )


def _budget_articles() -> list[NormalizedArticle]:
    return [
        _article(
            'guardian',
            'City Council Approves New Budget for Schools and Transit',
            'Council members voted 7-2 to approve the city budget, adding funding for schools and transit.',
            'https://www.theguardian.com/city/budget',
            '2026-03-01T10:00:00Z',
        ),
        _article(
            'gdelt',
            'Council approves city budget plan with school and transit funding',
            'The approved city budget plan increases school funding and expands transit service.',
            'https://www.example-wire.com/budget',
            '2026-03-01T12:00:00Z',
        ),
        _article(
            'currents',
            'Storm warning issued for coastal regions',
            'Heavy rain and winds expected along the coast this weekend.',
            'https://www.example-daily.com/storm',
            '2026-03-01T09:00:00Z',
        ),
    ]


def test_group_similar_articles_empty_input() -> None:
    assert group_similar_articles([]) == []


def test_group_similar_articles_pairs_cross_source_story() -> None:
    articles = _budget_articles()
    groups = group_similar_articles(articles, similarity_threshold=0.2)

    assert len(groups) == 2
    first, second = groups
    assert first.source_count() == 2
    assert {article.url for article in first.articles} == {articles[0].url, articles[1].url}
    assert [article.url for article in second.articles] == [articles[2].url]


def test_group_similar_articles_partitions_every_article() -> None:
    articles = _budget_articles()
    groups = group_similar_articles(articles)
    urls = [article.url for group in groups for article in group.articles]

    assert sorted(urls) == sorted(article.url for article in articles)
    assert len({group.group_id for group in groups}) == len(groups)
    assert all(group.articles for group in groups)


def test_cross_source_boost_applies_only_to_new_sources() -> None:
    first = _article('guardian', 'Budget vote delayed', 'Council postpones decision on spending plan.',
                     'https://one.example.com/budget')
    same_source = _article('guardian', 'Budget talks continue', 'Negotiators meet again over spending.',
                           'https://two.example.org/budget')
    other_source = _article('gdelt', 'Budget talks continue', 'Negotiators meet again over spending.',
                            'https://two.example.org/budget')

    assert len(cluster_articles([first, same_source], threshold=0.25)) == 2
    groups = cluster_articles([first, other_source], threshold=0.25)
    assert len(groups) == 1
    assert groups[0].source_count() == 2


def test_dedupe_group_keeps_latest_article_per_source() -> None:
    group = ArticleGroup(
        group_id='group-1',
        articles=[
            _article('gdelt', 'Earlier wire report', 'First take.', 'https://wire.example/1', '2026-03-01T08:00:00Z'),
            _article('guardian', 'Guardian report', 'Analysis.', 'https://www.theguardian.com/1',
                     '2026-03-01T09:00:00Z'),
            _article('gdelt', 'Updated wire report', 'Second take.', 'https://wire.example/2',
                     '2026-03-01T11:00:00Z'),
            _article('gdelt', 'Undated wire report', 'No date.', 'https://wire.example/3', 'not a date'),
        ],
    )
    deduped = dedupe_group(group)

    assert [article.url for article in deduped.articles] == [
        'https://wire.example/2',
        'https://www.theguardian.com/1',
    ]
    assert deduped.group_id == 'group-1'


def test_dedupe_group_replaces_undated_article_with_dated_one() -> None:
    group = ArticleGroup(
        group_id='group-7',
        articles=[
            _article('currents', 'Undated', 'No date.', 'https://daily.example/1', ''),
            _article('currents', 'Dated', 'Has date.', 'https://daily.example/2', '2026-03-01T11:00:00Z'),
        ],
    )
    assert [article.url for article in dedupe_group(group).articles] == ['https://daily.example/2']


def test_order_groups_puts_multi_source_first_and_keeps_relative_order() -> None:
    single_a = ArticleGroup('group-1', [_article('guardian', 'A', 'a', 'https://a.example')])
    multi_b = ArticleGroup('group-2', [
        _article('guardian', 'B', 'b', 'https://b.example/1'),
        _article('gdelt', 'B', 'b', 'https://b.example/2'),
    ])
    single_c = ArticleGroup('group-3', [_article('currents', 'C', 'c', 'https://c.example')])
    multi_d = ArticleGroup('group-4', [
        _article('currents', 'D', 'd', 'https://d.example/1'),
        _article('gdelt', 'D', 'd', 'https://d.example/2'),
    ])

    ordered = order_groups([single_a, multi_b, single_c, multi_d])
    assert [group.group_id for group in ordered] == ['group-2', 'group-4', 'group-1', 'group-3']


def test_merge_groups_joins_disjoint_sources_on_same_story() -> None:
    articles = _budget_articles()
    groups = [
        ArticleGroup('group-1', [articles[0]]),
        ArticleGroup('group-2', [articles[1]]),
    ]
    merged = merge_groups(groups, threshold=0.2)

    assert len(merged) == 1
    assert merged[0].group_id == 'group-1'
    assert [article.url for article in merged[0].articles] == [articles[0].url, articles[1].url]


def test_merge_groups_never_merges_groups_sharing_a_source() -> None:
    articles = _budget_articles()
    duplicate_source = _article(
        'guardian',
        'Council approves city budget plan with school and transit funding',
        'The approved city budget plan increases school funding and expands transit service.',
        'https://www.theguardian.com/city/budget-2',
    )
    groups = [
        ArticleGroup('group-1', [articles[0]]),
        ArticleGroup('group-2', [duplicate_source]),
    ]
    merged = merge_groups(groups, threshold=0.2)
    assert [group.group_id for group in merged] == ['group-1', 'group-2']


def test_merge_groups_leaves_unrelated_groups_alone() -> None:
    articles = _budget_articles()
    groups = [
        ArticleGroup('group-1', [articles[0]]),
        ArticleGroup('group-2', [articles[2]]),
    ]
    merged = merge_groups(groups, threshold=0.2)
    assert len(merged) == 2


def test_titles_only_budget_scenario() -> None:
    articles = [
        _article('guardian', 'City Council Approves New Budget', '', 'https://www.theguardian.com/budget'),
        _article('gdelt', 'Council approves city budget plan', '', 'https://wire.example.com/budget'),
        _article('currents', 'Local weather forecast for the weekend', '', 'https://daily.example.com/weather'),
    ]
    groups = group_similar_articles(articles, similarity_threshold=0.2)

    assert len(groups) == 2
    assert {article.source for article in groups[0].articles} == {'guardian', 'gdelt'}
    assert [article.source for article in groups[1].articles] == ['currents']


def test_identical_text_clusters_at_high_threshold() -> None:
    articles = [
        _article('guardian', 'Flooding closes major highway', 'Officials shut the road after heavy rain.',
                 'https://www.theguardian.com/flood'),
        _article('currents', 'Flooding closes major highway', 'Officials shut the road after heavy rain.',
                 'https://daily.example.com/flood'),
    ]
    groups = cluster_articles(articles, threshold=0.9)
    assert len(groups) == 1
    assert len(groups[0].articles) == 2


def test_out_of_range_offset_dates_do_not_break_grouping() -> None:
    articles = _budget_articles()
    articles.append(_article(
        'gdelt',
        'Council approves city budget plan with school and transit funding',
        'The approved city budget plan increases school funding and expands transit service.',
        'https://www.example-wire.com/budget-late',
        '9999-12-31T23:00:00-05:00',
    ))
    articles.append(_article(
        'currents',
        'Storm warning issued for coastal regions',
        'Heavy rain and winds expected along the coast this weekend.',
        'https://www.example-daily.com/storm-early',
        '0001-01-01T00:00:00+05:00',
    ))
    groups = group_similar_articles(articles, similarity_threshold=0.2)

    urls = {article.url for group in groups for article in group.articles}
    assert 'https://www.example-wire.com/budget' in urls
    assert 'https://www.example-wire.com/budget-late' not in urls
    assert 'https://www.example-daily.com/storm' in urls
    for group in groups:
        sources = [article.source for article in group.articles]
        assert len(sources) == len(set(sources))


def test_cross_source_group_wins_over_closer_same_source_group() -> None:
    wire = _article('gdelt', 'Harbour bridge traffic diverted', 'Drivers near the harbour bridge face long delays.',
                    'https://b.example.com/1')
    first = _article('guardian', 'Flooding closes major highway', 'Officials shut the road after heavy rain.',
                     'https://a.example.com/1')
    follow_up = _article(
        'guardian',
        'Flooding closes major highway near harbour',
        'Officials shut the road after heavy rain near the harbour bridge.',
        'https://c.example.com/1',
    )
    groups = cluster_articles([wire, first, follow_up], threshold=0.2)

    assert [[article.url for article in group.articles] for group in groups] == [
        ['https://b.example.com/1', 'https://c.example.com/1'],
        ['https://a.example.com/1'],
    ]


def test_merge_groups_tracks_sources_added_by_earlier_merges() -> None:
    articles = _budget_articles()
    second_wire = _article(
        'gdelt',
        'City council approves budget for schools and transit',
        'Council members approved the city budget with new school and transit funding.',
        'https://www.example-wire.com/budget-2',
        '2026-03-01T13:00:00Z',
    )
    groups = [
        ArticleGroup('group-1', [articles[0]]),
        ArticleGroup('group-2', [articles[1]]),
        ArticleGroup('group-3', [second_wire]),
    ]
    merged = merge_groups(groups, threshold=0.2)

    assert [group.group_id for group in merged] == ['group-1', 'group-3']
    assert [article.source for article in merged[0].articles] == ['guardian', 'gdelt']
    assert merged[1].articles == [second_wire]
