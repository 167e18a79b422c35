"""
Wire models for the search ingester.

- event_model: Queue event, document and keyword models
"""
