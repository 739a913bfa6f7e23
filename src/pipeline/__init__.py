"""
Pipeline stages for OrderStar.

Each stage consumes the previous stage's output:
- Raw Record Loader
- Field Normalizer
- Dimension Builder
- Fact Linker
- Aggregation Engine
"""
