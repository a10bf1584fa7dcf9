"""Crawl-state engine: normalizer, dedup store, domain filter, classifier, dispatcher."""
