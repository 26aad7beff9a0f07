"""
WageMap — County Wage-Level Classifier
=======================================================
Hexagonal (Ports & Adapters) architecture.

Layer map
─────────────────────────────────────────────────────
  config/       All tuneable settings
  domain/       Pure business objects (models, constants, exceptions) — no I/O
  ports/        Abstract interfaces (Python Protocols)
  adapters/     Concrete implementations of each Port (filesystem, HTTP, renderer)
  services/     Classification, geometry, indexing and the selection state machine
  interfaces/   Delivery layer: CLI, Streamlit UI
  tests/        Full test suite: unit / integration / e2e

Swapping a data source or the rendering surface:
  1. Write a new adapter in adapters/ implementing the relevant Port
  2. Change the wiring in services/container.py
  3. Done — zero other files touched
"""
__version__ = "1.0.0"
