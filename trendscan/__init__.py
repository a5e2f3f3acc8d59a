"""
trendscan: AI trend digest scanner.

Harvests candidate signals from public sources, ranks and deduplicates them,
and asks an LLM to turn the best of them into structured trend summaries.
"""
