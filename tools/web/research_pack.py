"""Build the research-enriched context block injected into section prompts."""

from .contracts import SearchResult

RAW_CONTENT_LIMIT = 1500


def format_search_results(results: list[SearchResult]) -> str:
    blocks = []
    for idx, result in enumerate(results, start=1):
        lines = [
            f"## Search Result {idx}: {result.title}",
            f"Source: {result.url}",
            f"Content: {result.content}",
        ]
        if result.raw_content:
            lines.append(f"Full Content: {result.raw_content[:RAW_CONTENT_LIMIT]}...")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def build_enriched_context(context: str, results: list[SearchResult], keywords: list[str]) -> str:
    """
    Append formatted search results and the keywords used to ``context``.

    With no results the original context is returned unchanged.
    """
    if not results:
        return context

    return "\n".join(
        [
            context,
            "",
            "## RECENT SEARCH RESULTS AND CURRENT INFORMATION:",
            format_search_results(results),
            "",
            "## SEARCH KEYWORDS USED:",
            ", ".join(keywords),
        ]
    )
