# democracy_lens/analyzer.py
"""
LLM-backed article and comment analysis.

Every public method returns a usable value: when the client is missing, the
API call raises, or the completion cannot be interpreted, the heuristic or a
fixed default takes its place. Callers never see an exception from here.
"""
from __future__ import annotations

from typing import Optional
import random

from openai import OpenAI

from .config import OPENAI_MODEL
from .heuristics import BiasTable, DEFAULT_BIAS_TABLE, source_based_score
from .llm_parsing import (
    CommentAnalysis,
    LocationResult,
    fallback_comment_analysis,
    fallback_location,
    parse_comment_analysis,
    parse_location,
    parse_political_score,
)
from .logging_setup import get_logger
from .models import Article

logger = get_logger("democracy_lens.analyzer")


def _truncate(s: Optional[str], max_chars: int = 6000) -> str:
    return (s or "")[:max_chars]


def _article_block(article: Article) -> str:
    lines = [
        f"Title: {article.title}",
        f"Source: {article.source}",
        f"Description: {article.description}",
    ]
    if article.content:
        lines.append(f"Content: {_truncate(article.content)}")
    return "\n".join(lines)


def fallback_summary(article: Article) -> str:
    return (
        f"This article discusses {(article.title or '').lower()}. "
        "Key points include policy implications, economic factors, and potential social impacts."
    )


class LLMAnalyzer:
    def __init__(
        self,
        client: Optional[OpenAI] = None,
        model: str = OPENAI_MODEL,
        bias_table: Optional[BiasTable] = None,
        rng: Optional[random.Random] = None,
    ):
        self.client = client
        self.model = model
        self.bias_table = bias_table or DEFAULT_BIAS_TABLE
        self.rng = rng

    @property
    def enabled(self) -> bool:
        return self.client is not None

    def _complete(self, prompt: str, max_tokens: int) -> str:
        resp = self.client.chat.completions.create(
            model=self.model,
            temperature=0.2,
            max_tokens=max_tokens,
            messages=[{"role": "user", "content": prompt}],
        )
        return resp.choices[0].message.content or ""

    def heuristic_score(self, article: Article) -> float:
        return source_based_score(
            article.source, article.title, article.description,
            table=self.bias_table, rng=self.rng,
        )

    # ---------- Articles ----------

    def summarize_article(self, article: Article) -> str:
        if not self.enabled:
            return fallback_summary(article)

        prompt = f"""
Please provide a concise summary (2-3 sentences) of the following news article:

{_article_block(article)}

Your summary should be objective and highlight the key points of the article.
""".strip()
        try:
            text = self._complete(prompt, max_tokens=150).strip()
            return text or fallback_summary(article)
        except Exception as e:
            logger.exception("OPENAI_SUMMARY_FAILED", extra={"article_id": article.id, "error": type(e).__name__})
            return fallback_summary(article)

    def political_leaning(self, article: Article) -> float:
        if not self.enabled:
            return self.heuristic_score(article)

        prompt = f"""
Please analyze the political leaning of the following news article on a scale from -10 (extremely liberal) to +10 (extremely conservative).

{_article_block(article)}

Consider the following factors:
- Language and framing
- Topic selection and emphasis
- Source reputation
- Presentation of different viewpoints

Provide ONLY a single number between -10 and 10 representing the political leaning score.
Return ONLY the numerical score with no additional text.
""".strip()
        try:
            text = self._complete(prompt, max_tokens=10)
        except Exception as e:
            logger.exception("OPENAI_LEANING_FAILED", extra={"article_id": article.id, "error": type(e).__name__})
            return self.heuristic_score(article)

        score = parse_political_score(text)
        if score is None:
            logger.info("LEANING_FALLBACK", extra={"article_id": article.id, "raw": (text or "")[:40]})
            return self.heuristic_score(article)
        return score

    def extract_location(self, article: Article) -> LocationResult:
        if not self.enabled:
            return fallback_location(article.title, article.source)

        prompt = f"""
Please analyze the following news article and extract the primary geographic location it relates to.

{_article_block(article)}

Return your response in JSON format with the following structure:
{{
  "location": "Name of city/country/region",
  "coordinates": {{ "lat": latitude, "lng": longitude }},
  "confidence": a number between 0 and 1 representing your confidence in this location extraction
}}

If you cannot determine a specific geographic location, set coordinates to null.
Return ONLY the JSON with no additional text.
""".strip()
        try:
            text = self._complete(prompt, max_tokens=200)
        except Exception as e:
            logger.exception("OPENAI_LOCATION_FAILED", extra={"article_id": article.id, "error": type(e).__name__})
            return fallback_location(None, article.source)
        return parse_location(text, title=article.title, source=article.source)

    # ---------- Comments ----------

    def analyze_comment(self, content: str) -> CommentAnalysis:
        if not self.enabled:
            return fallback_comment_analysis()

        prompt = f"""
Please analyze the political leaning of the following comment and provide:
1. A brief summary (1-2 sentences)
2. A political leaning score from -10 (extremely liberal) to +10 (extremely conservative)

Comment: "{_truncate(content, 4000)}"

Format your response as JSON with the following structure:
{{
  "summary": "Brief summary of the comment",
  "politicalScore": number from -10 to 10
}}

Return ONLY the JSON with no additional text or markdown formatting.
""".strip()
        try:
            text = self._complete(prompt, max_tokens=200)
        except Exception as e:
            logger.exception("OPENAI_COMMENT_FAILED", extra={"error": type(e).__name__})
            return fallback_comment_analysis()
        return parse_comment_analysis(text)
