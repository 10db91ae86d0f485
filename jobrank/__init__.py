"""
jobrank: résumé-driven job ranking.

Given a résumé and a batch of candidate jobs, jobrank scores every job
for fit and explains each score.  The subpackages follow the flow of a
ranking request:

1. **resume** – Parse résumé text into dated roles with inferred
   industries, weigh its keywords by recency, tenure, industry and
   seniority, and optionally embed it.
2. **ingest** – Backfill thin job postings by fetching their detail
   pages.
3. **normalize** – Job dataclasses and HTML-to-fields extraction.
4. **rank** – Hybrid keyword/embedding scoring, an optional LLM rerank
   of the best matches, and result caching.
5. **service** – The request boundary that maps outcomes to status
   codes; **cli** wires everything together for the command line.
"""

__version__ = "0.1.0"
