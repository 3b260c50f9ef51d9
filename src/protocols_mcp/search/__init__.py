"""Protocol Search - Indexing, matching and task routing

Usage:
    from protocols_mcp.search import ContentIndexer, SearchMatcher

    index = ContentIndexer().build_index(protocols, content_map)
    results = SearchMatcher().search(index, "security audit")

    task_type = analyze_task_intent("fix this crash")
    steps = build_workflow(task_type)
"""

from .indexer import ContentIndexer, SearchableProtocol, SearchIndex, tokenize
from .matcher import SearchMatcher, levenshtein_distance, levenshtein_similarity
from .task_analyzer import (
    analyze_task_intent,
    get_task_difficulty,
    get_task_tags,
    get_task_time_estimate,
    parse_task_type,
)
from .workflow_builder import assemble_workflow, build_workflow, get_workflow_shortcuts

__all__ = [
    "ContentIndexer",
    "SearchIndex",
    "SearchMatcher",
    "SearchableProtocol",
    "analyze_task_intent",
    "assemble_workflow",
    "build_workflow",
    "get_task_difficulty",
    "get_task_tags",
    "get_task_time_estimate",
    "get_workflow_shortcuts",
    "levenshtein_distance",
    "levenshtein_similarity",
    "parse_task_type",
    "tokenize",
]
