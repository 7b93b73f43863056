##########################################################################################
#
# Script name: summarizer.py
#
# Description: Per-group story summaries via OpenAI with a deterministic fallback.
#
##########################################################################################

import json
import logging
import os
import re
from concurrent.futures import ThreadPoolExecutor
from functools import lru_cache
from pathlib import Path

from openai import OpenAI

from .config import (
    GENERIC_TITLE_PATTERNS,
    MAX_CONCURRENT_SUMMARIES,
    SUMMARY_LEAD_INS,
    TITLE_OUTLET_SUFFIX_PATTERN,
    TITLE_PREFIX_PATTERN,
)
from .models import ArticleGroup
from .utils import normalize_whitespace


# ****************************************************************************************
# Global data and configuration
# ****************************************************************************************

log = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = 'You are a news analysis assistant. Always respond with valid JSON only.'
DEFAULT_MODEL = 'gpt-4.1-mini'

ROOT_DIR = Path(__file__).resolve().parent.parent
SYSTEM_PROMPT_PATH = Path(os.getenv('SUMMARY_SYSTEM_PROMPT_FILE') or (ROOT_DIR / 'prompts' / 'system.md'))

SENTENCE_SPLIT = re.compile(r'[.!?]+')
LEAD_IN_PATTERN = re.compile(r'^(' + '|'.join(re.escape(phrase) for phrase in SUMMARY_LEAD_INS) + r')\s+', re.IGNORECASE)


# ****************************************************************************************
# Functions
# ****************************************************************************************


@lru_cache(maxsize=1)
def _load_system_prompt() -> str:
    if not SYSTEM_PROMPT_PATH.exists():
        return DEFAULT_SYSTEM_PROMPT
    try:
        content = SYSTEM_PROMPT_PATH.read_text(encoding='utf-8').strip()
    except OSError as exc:
        log.warning('Failed reading system prompt file %s: %s', SYSTEM_PROMPT_PATH, exc)
        return DEFAULT_SYSTEM_PROMPT
    return content or DEFAULT_SYSTEM_PROMPT


def _sentences(text: str) -> list[str]:
    return [part.strip() for part in SENTENCE_SPLIT.split(text or '') if part.strip()]


def is_generic_title(title: str) -> bool:
    if not title or len(title) < 10:
        return True
    lowered = title.lower()
    if any(pattern in lowered for pattern in GENERIC_TITLE_PATTERNS):
        return True
    return bool(re.match(r'^story\s+\d+$', lowered))


def clean_headline(title: str) -> str:
    cleaned = re.sub(TITLE_PREFIX_PATTERN, '', title or '', flags=re.IGNORECASE)
    cleaned = re.sub(TITLE_OUTLET_SUFFIX_PATTERN, '', cleaned, flags=re.IGNORECASE)
    return cleaned.strip()


def generate_neutral_title(title: str | None, description: str | None, summary: str | None) -> str:
    if summary and len(summary.strip()) > 10:
        sentences = _sentences(summary)
        if sentences:
            candidate = LEAD_IN_PATTERN.sub('', sentences[0]).strip()
            words = candidate.split()
            if len(words) > 15:
                candidate = ' '.join(words[:15])
            if 20 <= len(candidate) <= 100:
                return candidate[0].upper() + candidate[1:]

    if title and title.strip():
        cleaned = clean_headline(title)
        if len(cleaned) > 100:
            truncated = cleaned[:97]
            last_space = truncated.rfind(' ')
            cleaned = truncated[:last_space] if last_space > 40 else truncated
        if len(cleaned) >= 15:
            return cleaned

    base = (description or summary or 'News story').strip()
    short = SENTENCE_SPLIT.split(base)[0].strip()
    return short or 'News story'


def generate_basic_summary(group: ArticleGroup) -> dict:
    articles = group.articles or []
    sources = list(dict.fromkeys(article.source_name or article.source or 'Unknown' for article in articles))

    snippets: list[str] = []
    for article in articles:
        description = (article.description or '').strip()
        if len(description) > 40:
            sentences = _sentences(description)
            piece = '. '.join(sentences[:2])
            if len(piece) > 40:
                snippets.append(piece)
        elif article.title and len(article.title.strip()) > 20:
            snippets.append(article.title.strip())
        if len(snippets) >= 3:
            break

    if snippets:
        summary = ' '.join(snippets) + '.'
    else:
        titles = [article.title for article in articles if article.title]
        if titles:
            summary = '; '.join(titles)
        else:
            summary = f'Multiple sources ({", ".join(sources)}) reported on this story, but details are limited.'
    summary = normalize_whitespace(summary)

    first = articles[0] if articles else None
    return {
        'groupId': group.group_id or 'unknown-group',
        'groupTitle': generate_neutral_title(
            first.title if first else None,
            first.description if first else None,
            summary,
        ),
        'summary': summary,
    }


def _build_prompt(group: ArticleGroup) -> str:
    blocks = []
    for index, article in enumerate(group.articles, start=1):
        content = (article.content or article.description or '')[:800] or 'No content available'
        blocks.append(
            f'[{(article.source or article.source_name or "Unknown").upper()} - Article {index}]\n'
            f'Title: {article.title or "No title"}\n'
            f'Description: {article.description or "No description"}\n'
            f'Content: {content}\n'
            f'URL: {article.url or "Unknown URL"}\n'
            f'Published: {article.published_at or "Unknown date"}\n'
            '---'
        )
    articles_text = '\n\n'.join(blocks)
    return (
        'You are analyzing multiple news articles about the same real-world story from different sources.\n'
        'Create ONE comprehensive, informative combined summary that synthesizes information from all sources.\n\n'
        'Here are the articles:\n\n'
        f'{articles_text}\n\n'
        'Return ONLY valid JSON with this exact shape:\n'
        '{"groupTitle": "A short, neutral, headline-style title (5-12 words) that describes the story as a whole. '
        'Do NOT copy any single article headline.", '
        '"summary": "A combined summary (4-7 sentences, about 150-250 words) covering who, what, when, where, '
        'why and how, with specific names, dates, places and numbers. Do not mention or compare sources."}'
    )


def _request_llm_summary(group: ArticleGroup) -> dict | None:
    api_key = os.getenv('OPENAI_API_KEY')
    if not api_key:
        return None
    model = os.getenv('OPENAI_MODEL') or DEFAULT_MODEL
    client = OpenAI(api_key=api_key, base_url=os.getenv('OPENAI_BASE_URL') or None, timeout=30.0)
    try:
        response = client.chat.completions.create(
            model=model,
            temperature=0.4,
            max_tokens=800,
            response_format={'type': 'json_object'},
            messages=[
                {'role': 'system', 'content': _load_system_prompt()},
                {'role': 'user', 'content': _build_prompt(group)},
            ],
        )
        content = response.choices[0].message.content
        parsed = json.loads(content) if isinstance(content, str) else content
    except Exception as exc:  # noqa: BLE001
        log.warning('OpenAI summary failed for %s: %s', group.group_id, exc)
        return None
    if not isinstance(parsed, dict):
        log.warning('OpenAI summary for %s was not a JSON object.', group.group_id)
        return None
    return parsed


def summarize_group(group: ArticleGroup) -> dict:
    if group is None or not group.articles:
        return {
            'groupId': getattr(group, 'group_id', None) or 'unknown-group',
            'groupTitle': 'News story',
            'summary': 'No articles to summarize.',
        }

    parsed = _request_llm_summary(group)
    if parsed is None:
        if not os.getenv('OPENAI_API_KEY'):
            log.debug('No OPENAI_API_KEY set; using basic summary for %s.', group.group_id)
        return generate_basic_summary(group)

    raw_summary = parsed.get('summary')
    raw_title = parsed.get('groupTitle')
    raw_summary = raw_summary.strip() if isinstance(raw_summary, str) else ''
    raw_title = raw_title.strip() if isinstance(raw_title, str) else ''

    summary = raw_summary if len(raw_summary) > 20 else generate_basic_summary(group)['summary']
    if is_generic_title(raw_title):
        first = group.articles[0]
        group_title = generate_neutral_title(first.title, first.description, summary)
    else:
        group_title = raw_title
    return {'groupId': group.group_id, 'groupTitle': group_title, 'summary': summary}


def summarize_groups(groups: list[ArticleGroup], max_concurrent: int = MAX_CONCURRENT_SUMMARIES) -> list[dict | None]:
    '''
    Summarize groups in batches of at most ``max_concurrent`` parallel calls.

    Output:
        One entry per input group, in input order. A group whose summary task
        raised gets None so the caller can substitute its own fallback.
    '''
    results: list[dict | None] = []
    if not groups:
        return results
    workers = max(1, max_concurrent)
    with ThreadPoolExecutor(max_workers=workers) as executor:
        for start in range(0, len(groups), workers):
            batch = groups[start : start + workers]
            futures = [executor.submit(summarize_group, group) for group in batch]
            for group, future in zip(batch, futures):
                try:
                    results.append(future.result())
                except Exception as exc:  # noqa: BLE001
                    log.exception('Summarization failed for group %s: %s', group.group_id, exc)
                    results.append(None)
    return results
