"""
Digest: turns the ranked candidate set into analysed trends.

Formatting, the LLM client and its retry policy, response parsing, the
pipeline orchestrator, and the store/notifier collaborators.
"""
