"""
Dimension Registry Module.

Natural-key to surrogate-id registries for each dimension kind,
and the star schema that groups them with the fact table.
"""
