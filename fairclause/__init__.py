"""FairClause document analysis and fairness benchmarking package.

This package contains the analysis pipeline:
- ingestion: text extraction from PDF, Word and text uploads
- agents: prompt building, the AI gateway, response parsing, fallback
  synthesis and the benchmark comparator
- pipeline: the orchestrator that sequences one request end to end
- event_log: structured pipeline events keyed by request id
"""
