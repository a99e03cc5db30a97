"""
Application Layer

Contains the stateful services that run a subscription and the ports they
consume. This layer orchestrates domain objects and transport adapters.

Structure:
- services/: Playback queue, connection supervisor, music subscription
- interfaces/: Port interfaces for the voice transport and media resolution
"""
