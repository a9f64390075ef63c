"""Core components for the releasecheck application.

This package contains the fundamental building blocks of the validation
engine, including the release model, the error taxonomy, the base class for
all validators, the configuration manager, and the main validation
orchestrator.
"""
