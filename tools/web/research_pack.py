"""Flatten a SearchResult into the text block injected into the system preamble."""

from .contracts import SearchResult

SEARCH_CONTEXT_HEADER = (
    "## CONTEXTO DE PESQUISA WEB (dados reais e atualizados, use para enriquecer sua resposta):"
)


def format_search_context(result: SearchResult) -> str:
    """
    Render the merged search result as plain text.

    Order: encyclopedia summary, instant answer, then one bullet per related link.
    """
    ctx = ""
    if result.encyclopedia:
        ctx += f"Wikipedia ({result.encyclopedia.title}): {result.encyclopedia.text}\n\n"
    if result.instant:
        source = result.instant.source or "DuckDuckGo"
        ctx += f"{source} ({result.instant.title}): {result.instant.text}\n\n"
    for link in result.related:
        ctx += f"- {link.text}\n"
    return ctx.strip()


def build_system_preamble(system: str | None, search_context: str | None) -> str:
    """Append the search context block (if any) to the caller's system prompt."""
    content = system or ""
    if search_context:
        content += f"\n\n{SEARCH_CONTEXT_HEADER}\n{search_context}"
    return content
