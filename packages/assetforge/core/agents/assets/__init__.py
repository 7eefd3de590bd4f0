"""Asset generation pipeline.

Prompt resolution, texture synthesis, tessellation parameters and
entitlement-gated export for text-to-asset generation.
"""
