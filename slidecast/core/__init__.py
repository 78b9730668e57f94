"""
Core data model for SlideCast: schedule, progress, session state and errors.
"""
