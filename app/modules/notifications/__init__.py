"""Notification delivery orchestration.

Submodules:
    domain: records, errors and the lifecycle state machine
    templates: rendering and template administration
    preferences: preference evaluation and administration
    core: the orchestrator and channel administration
    api: FastAPI controllers and dependency providers
"""
