"""Personal medication-adherence tracking.

This package holds the medication registry, the dose log and the adherence
calculations derived from them, isolated from any presentation layer.
"""
