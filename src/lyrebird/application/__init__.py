"""
Application Layer

Orchestrates domain objects and infrastructure ports.

Structure:
- services/: Session registry, playback, pagination, and restart hand-over
- interfaces/: Port interfaces for infrastructure adapters
"""
