##########################################################################################
#
# Script name: render.py
#
# Description: Static-page rendering of aggregated story groups and their JSON payload.
#
##########################################################################################

import json
import re
from html import escape
from pathlib import Path

from .models import AggregateResult, NormalizedArticle, SummarizedGroup
from .utils import parse_timestamp


# ****************************************************************************************
# Global data and configuration
# ****************************************************************************************

CSS = '''
:root {
  --bg-1: #fdf7ea;
  --bg-2: #e6f0ff;
  --surface: rgba(255, 255, 255, 0.82);
  --text: #1d212a;
  --muted: #5b6270;
  --stroke: rgba(31, 42, 64, 0.14);
  --accent: #004f8c;
  --accent-2: #008056;
}

* { box-sizing: border-box; }
html, body { margin: 0; padding: 0; }
body {
  font-family: "IBM Plex Sans", "Segoe UI", sans-serif;
  color: var(--text);
  background: linear-gradient(165deg, var(--bg-1), var(--bg-2));
  min-height: 100vh;
}

.wrap {
  max-width: 1150px;
  margin: 0 auto;
  padding: 1.2rem 1rem 4rem;
}

.headline {
  font-size: clamp(1.8rem, 3.6vw, 3rem);
  line-height: 1.05;
  margin: 0;
}

.subline, .meta, footer {
  color: var(--muted);
}

.grid {
  display: grid;
  grid-template-columns: repeat(auto-fit, minmax(320px, 1fr));
  gap: 0.95rem;
  margin-top: 1.2rem;
}

.story-card {
  background: var(--surface);
  border: 1px solid var(--stroke);
  border-radius: 14px;
  padding: 0.9rem;
}

.story-card h2 {
  margin: 0;
  font-size: 1.1rem;
  line-height: 1.2;
}

.badges {
  display: flex;
  flex-wrap: wrap;
  gap: 0.3rem;
  margin: 0.45rem 0;
}

.badge {
  border: 1px solid var(--stroke);
  border-radius: 999px;
  padding: 0.1rem 0.55rem;
  font-size: 0.74rem;
  font-weight: 700;
  background: #fff;
}

.badge-multi {
  background: #e9fff4;
  border-color: #9ddac0;
  color: var(--accent-2);
}

.summary {
  margin: 0.3rem 0;
  font-size: 0.93rem;
}

.sources {
  margin: 0.5rem 0 0;
  padding-left: 1.1rem;
  font-size: 0.85rem;
}

.sources a {
  color: var(--accent);
}

.warnings {
  margin-top: 1rem;
  color: #8a4b00;
  font-size: 0.85rem;
}
'''


# ****************************************************************************************
# Functions
# ****************************************************************************************


def result_slug(result: AggregateResult) -> str:
    parts = [result.query or result.category or 'latest']
    if result.country:
        parts.append(result.country)
    page = result.pagination.current_page if result.pagination else 1
    parts.append(f'page-{page}')
    slug = re.sub(r'[^a-z0-9]+', '-', '-'.join(parts).lower()).strip('-')
    return slug or 'aggregate'


def _render_article(article: NormalizedArticle) -> str:
    published = parse_timestamp(article.published_at)
    when = published.strftime('%Y-%m-%d %H:%M UTC') if published else 'time unknown'
    return (
        f'<li><a href="{escape(article.url)}" target="_blank" rel="noopener noreferrer">'
        f'{escape(article.title)}</a> <span class="meta">{escape(article.source_name)} · {escape(when)}</span></li>'
    )


def _render_group(group: SummarizedGroup) -> str:
    badges = ''.join(f'<span class="badge">{escape(source)}</span>' for source in group.sources)
    if group.source_count >= 2:
        badges += f'<span class="badge badge-multi">{group.source_count} sources</span>'
    articles_html = ''.join(_render_article(article) for article in group.articles)
    return (
        f'<article class="story-card" id="{escape(group.group_id)}">'
        f'<h2>{escape(group.group_title)}</h2>'
        f'<div class="badges">{badges}</div>'
        f'<p class="summary">{escape(group.summary)}</p>'
        f'<ul class="sources">{articles_html}</ul>'
        '</article>'
    )


def _render_page(result: AggregateResult) -> str:
    heading = result.query or (result.category or 'Latest').title()
    if result.country:
        heading = f'{heading} ({result.country.upper()})'
    pagination = result.pagination
    page_line = (
        f'Page {pagination.current_page} of {pagination.total_pages} · {pagination.total_groups} stories'
        if pagination
        else 'No stories'
    )
    warnings_html = ''
    if result.warnings:
        items = ''.join(f'<li>{escape(warning)}</li>' for warning in result.warnings)
        warnings_html = f'<aside class="warnings"><strong>Warnings</strong><ul>{items}</ul></aside>'
    groups_html = ''.join(_render_group(group) for group in result.grouped_articles)
    return f'''<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>{escape(heading)} - Story Aggregator</title>
    <link rel="stylesheet" href="./style.css" />
  </head>
  <body>
    <div class="wrap">
      <header>
        <h1 class="headline">{escape(heading)}</h1>
        <p class="subline">{escape(page_line)}</p>
      </header>
      <main class="grid">{groups_html}</main>
      {warnings_html}
      <footer>
        Generated {escape(result.generated_at)}. Each story links to the original articles.
      </footer>
    </div>
  </body>
</html>
'''


def write_site(result: AggregateResult, output_dir: str) -> Path:
    root = Path(output_dir)
    data_dir = root / 'data'
    root.mkdir(parents=True, exist_ok=True)
    data_dir.mkdir(parents=True, exist_ok=True)

    slug = result_slug(result)
    (data_dir / f'{slug}.json').write_text(
        json.dumps(result.to_dict(), ensure_ascii=True, indent=2), encoding='utf-8'
    )
    (root / 'style.css').write_text(CSS.strip() + '\n', encoding='utf-8')
    index_path = root / 'index.html'
    index_path.write_text(_render_page(result), encoding='utf-8')
    return index_path
