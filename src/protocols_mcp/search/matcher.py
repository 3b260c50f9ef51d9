"""Search Matcher

Weighted full-text search, fuzzy name matching and context re-ranking
over a SearchIndex.

Scoring (per query token, summed):
    - Title contains token: +10
    - Any trigger contains token: +8
    - Purpose contains token: +5
    - Content tokens containing token: +1 each, at most +10

Scores are not normalized by document length, and the total is only
bounded by the number of query tokens.
"""

import logging
from dataclasses import replace
from types import MappingProxyType

from ..models import FuzzyMatch, ProjectContext, SearchResult
from .indexer import SearchIndex, SearchableProtocol

logger = logging.getLogger(__name__)

TITLE_WEIGHT = 10
TRIGGER_WEIGHT = 8
PURPOSE_WEIGHT = 5
CONTENT_TOKEN_CAP = 10

MAX_MATCH_LINES = 3
EXCERPT_LENGTH = 150
FUZZY_THRESHOLD = 0.3

LANGUAGE_BONUS = 5
FRAMEWORK_BONUS = 5
PLATFORM_BONUS = 3

# Name substrings that mark a protocol as relevant to a project type
PLATFORM_SIGNALS = MappingProxyType(
    {
        "frontend": ("frontend", "react", "accessibility", "aria"),
        "backend": ("backend", "api", "database", "performance"),
    }
)


class SearchMatcher:
    """Stateless scorer over a SearchIndex."""

    def search(
        self,
        index: SearchIndex,
        query: str,
        category: str | None = None,
        min_score: int = 0,
    ) -> list[SearchResult]:
        """
        Full-text search across protocols.

        Args:
            index: Index to search
            query: Whitespace-separated query terms
            category: Only consider protocols in this category (exact match)
            min_score: Keep results scoring strictly above this value

        Returns:
            Results sorted by score descending; ties keep index order
        """
        query_tokens = query.strip().lower().split()
        if not query_tokens:
            return []

        results = []
        for name, searchable in index.protocols.items():
            if category and searchable.metadata.category != category:
                continue

            score = self._calculate_score(query_tokens, searchable)
            if score > min_score:
                results.append(
                    SearchResult(
                        protocol=name,
                        score=score,
                        matches=self._find_matches(query_tokens, searchable.content),
                        excerpt=self._extract_excerpt(
                            query_tokens, searchable.content
                        ),
                    )
                )

        results.sort(key=lambda r: r.score, reverse=True)
        logger.debug(f"search '{query}' -> {len(results)} results")
        return results

    def fuzzy_match(self, index: SearchIndex, name: str) -> list[FuzzyMatch]:
        """
        Fuzzy match protocol names (typo tolerant).

        Args:
            index: Index whose protocol names are compared
            name: Approximate protocol name

        Returns:
            Matches with similarity above the threshold, best first
        """
        lower_name = name.lower()
        results = []

        for protocol_name in index.protocols:
            similarity = levenshtein_similarity(lower_name, protocol_name.lower())
            if similarity > FUZZY_THRESHOLD:
                results.append(FuzzyMatch(protocol=protocol_name, similarity=similarity))

        results.sort(key=lambda r: r.similarity, reverse=True)
        return results

    def contextualize_results(
        self, results: list[SearchResult], context: ProjectContext
    ) -> list[SearchResult]:
        """
        Re-rank search results based on project context.

        Context only adjusts scores; it never removes results.

        Args:
            results: Results from search()
            context: Detected project context

        Returns:
            New list of results with adjusted scores and relevance labels
        """
        if not context.detected:
            return results

        lower_language = (context.language or "").lower()
        lower_framework = (context.framework or "").lower()
        platform_signals = PLATFORM_SIGNALS.get(context.project_type, ())

        contextualized = []
        for result in results:
            lower_name = result.protocol.lower()
            bonus = 0
            stack_matched = False

            if lower_language and lower_language in lower_name:
                bonus += LANGUAGE_BONUS
                stack_matched = True

            if (
                lower_framework
                and lower_framework != "unknown"
                and lower_framework in lower_name
            ):
                bonus += FRAMEWORK_BONUS
                stack_matched = True

            if any(signal in lower_name for signal in platform_signals):
                bonus += PLATFORM_BONUS

            if stack_matched:
                relevance = "high"
            elif bonus >= PLATFORM_BONUS:
                relevance = "medium"
            else:
                relevance = "low"

            contextualized.append(
                replace(result, score=result.score + bonus, context_relevance=relevance)
            )

        contextualized.sort(key=lambda r: r.score, reverse=True)
        return contextualized

    def _calculate_score(
        self, query_tokens: list[str], searchable: SearchableProtocol
    ) -> int:
        metadata = searchable.metadata
        lower_title = metadata.title.lower()
        lower_purpose = metadata.purpose.lower()
        lower_triggers = [t.lower() for t in metadata.triggers]

        score = 0
        for token in query_tokens:
            if token in lower_title:
                score += TITLE_WEIGHT
            if any(token in trigger for trigger in lower_triggers):
                score += TRIGGER_WEIGHT
            if token in lower_purpose:
                score += PURPOSE_WEIGHT

            token_count = sum(1 for t in searchable.tokens if token in t)
            score += min(token_count, CONTENT_TOKEN_CAP)

        return score

    def _find_matches(self, query_tokens: list[str], content: str) -> list[str]:
        """First content lines containing any query token."""
        matches = []
        for line in content.split("\n"):
            lower_line = line.lower()
            if any(token in lower_line for token in query_tokens):
                matches.append(line.strip())
                if len(matches) >= MAX_MATCH_LINES:
                    break
        return matches

    def _extract_excerpt(
        self, query_tokens: list[str], content: str, length: int = EXCERPT_LENGTH
    ) -> str:
        """Excerpt centred on the earliest query token occurrence."""
        lower_content = content.lower()
        positions = [
            idx for idx in (lower_content.find(token) for token in query_tokens)
            if idx != -1
        ]

        if not positions:
            suffix = "..." if len(content) > length else ""
            return content[:length] + suffix

        first_match = min(positions)
        half = length // 2
        start = max(0, first_match - half)
        end = min(len(content), first_match + half)

        prefix = "..." if start > 0 else ""
        suffix = "..." if end < len(content) else ""
        return prefix + content[start:end] + suffix


def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance (insert, delete, substitute) between two strings."""
    if len(a) < len(b):
        a, b = b, a

    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            if char_a == char_b:
                current.append(previous[j - 1])
            else:
                current.append(1 + min(previous[j - 1], previous[j], current[j - 1]))
        previous = current

    return previous[-1]


def levenshtein_similarity(a: str, b: str) -> float:
    """Normalized similarity: 1 - distance / longest length (1.0 for two empties)."""
    max_length = max(len(a), len(b))
    if max_length == 0:
        return 1.0
    return 1 - levenshtein_distance(a, b) / max_length
