"""
Trendscan Ingestion Module.

Pipeline stages:
1. Capture: Fetch candidates from HackerNews, Reddit, Bluesky, RSS feeds
2. Aggregate: Fan out adapters concurrently, tag cross-platform mentions
3. Score: Multiplicative relevance score per candidate
4. Dedupe: Drop near-duplicates against recent history and the batch itself
"""
