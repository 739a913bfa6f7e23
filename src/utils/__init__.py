"""
Utility modules for OrderStar.

Cross-cutting concerns:
- Storage: export of star-schema tables, reports and validation summaries
"""
